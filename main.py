"""Development entrypoint (``python main.py``)."""

import os

from loterias import create_app, start_scheduler

app = create_app()


if __name__ == "__main__":
    start_scheduler(app)
    # The reloader would start a second scheduler in the child process.
    app.run(host="127.0.0.1", port=int(os.getenv("PORT", "9050")), debug=False, use_reloader=False)
