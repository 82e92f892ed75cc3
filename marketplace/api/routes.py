# marketplace/api/routes.py
from fastapi import APIRouter

from ..utils import utcnow
from . import auth, categories, favorites, products, profile

router = APIRouter()


@router.get("/")
def root():
    return {
        "message": "Marketplace API",
        "version": "1.0.0",
        "endpoints": {
            "auth": "/api/auth",
            "products": "/api/products",
            "categories": "/api/categories",
            "profile": "/api/profile",
            "favorites": "/api/favorites",
        },
    }


@router.get("/health")
def health():
    return {"status": "ok", "timestamp": utcnow().isoformat()}


router.include_router(auth.router, prefix="/api/auth", tags=["auth"])
router.include_router(products.router, prefix="/api/products", tags=["products"])
router.include_router(categories.router, prefix="/api/categories", tags=["categories"])
router.include_router(profile.router, prefix="/api/profile", tags=["profile"])
router.include_router(favorites.router, prefix="/api/favorites", tags=["favorites"])
