from petstore.core.config import get_port
from petstore.main import create_app

app = create_app()

if __name__ == "__main__":
    # Threaded so concurrent requests exercise the reservation protocol
    app.run(host="0.0.0.0", port=get_port(), threaded=True)
