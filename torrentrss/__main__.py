"""Package entry point for `python -m torrentrss`."""

from torrentrss.config.env import DEBUG, FLASK_HOST, FLASK_PORT
from torrentrss.main import create_app

if __name__ == "__main__":
    create_app().run(host=FLASK_HOST, port=FLASK_PORT, debug=DEBUG)
