from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config


def add_cors(app: FastAPI) -> None:
    allow_all = config.CORS_ORIGINS == ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=not allow_all,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
