"""Development entry point: ``python app.py`` (APP_ENV selects the settings)."""

from src.timekeeping_system.timekeeping_system.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=app.config.get("DEBUG", False))
