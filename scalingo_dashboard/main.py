"""
Главная точка входа FastAPI‑приложения дашборда Scalingo.

Модуль настраивает логирование, создаёт приложение FastAPI и подключает
маршрутизатор JSON API с префиксом `/api`. Запуск:

    uvicorn scalingo_dashboard.main:app
"""

import logging

from fastapi import FastAPI

from scalingo_dashboard.api.endpoints import router

logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Scalingo Dashboard", version="1.0")

app.include_router(router, prefix="/api")
