from fastapi import APIRouter

from finance_api.api.v1.routes import auth, categories, transactions

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(categories.router)
api_router.include_router(transactions.router)
