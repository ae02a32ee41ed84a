# storefront/wsgi.py
# For gunicorn: gunicorn storefront.wsgi:app
import atexit

from storefront.app import create_app
from storefront.extensions import storage

app = create_app()


@atexit.register
def _close_storage():
    with app.app_context():
        storage.close()


if __name__ == "__main__":
    app.run(debug=True)
