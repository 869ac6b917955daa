"""Run the API with uvicorn: ``python -m fisio_api``."""

import uvicorn

from fisio_api.config import PORT


def main() -> None:
    uvicorn.run("fisio_api.main:app", host="0.0.0.0", port=PORT)  # noqa: S104


if __name__ == "__main__":
    main()
