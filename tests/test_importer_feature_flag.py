from flask import Flask

from catalog_app.importer import IMPORTER_EXTENSION_KEY, init_importer


def build_app(enabled=False):
    app = Flask(__name__)
    app.config.update(
        SECRET_KEY="test-secret",
        TESTING=True,
        IMPORTER_ENABLED=enabled,
        IMPORTER_BATCH_SIZE=250,
    )

    init_importer(app)
    return app


def test_importer_disabled_registers_stub_cli():
    app = build_app(enabled=False)

    assert "csv_import" not in app.blueprints
    assert app.extensions[IMPORTER_EXTENSION_KEY]["enabled"] is False

    runner = app.test_cli_runner()
    result = runner.invoke(args=["importer"])
    assert result.exit_code != 0
    assert "Importer commands are unavailable" in result.output


def test_importer_enabled_registers_blueprint_and_cli():
    app = build_app(enabled=True)

    assert "csv_import" in app.blueprints
    assert "csv_import.process_csv" in app.view_functions
    assert "csv_import.upload_csv" in app.view_functions

    runner = app.test_cli_runner()
    result = runner.invoke(args=["importer"])
    assert result.exit_code == 0, result.output
    assert "Mapping fields" in result.output

    importer_state = app.extensions[IMPORTER_EXTENSION_KEY]
    assert importer_state["enabled"] is True
    assert importer_state["batch_size"] == 250


def test_importer_flag_accepts_string_values():
    app = Flask(__name__)
    app.config.update(IMPORTER_ENABLED="false")

    init_importer(app)

    assert "csv_import" not in app.blueprints
