import logging

from services.config import load_settings
from ui.main_window import MainWindow


def main():
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    MainWindow(settings).run()


if __name__ == "__main__":
    main()
