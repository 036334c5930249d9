# app.py (gunicorn entrypoint: `gunicorn app:app`)

from farmdesk.app import create_app

app = create_app()


# Local run only
if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8000, debug=True)
