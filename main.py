"""Local development server.

  python main.py            # http://127.0.0.1:8000
  PORT=5000 python main.py
"""

import os

from dead_pigeons import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")), debug=bool(app.config.get("DEBUG")))
