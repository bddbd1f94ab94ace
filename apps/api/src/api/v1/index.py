# apps/api/src/api/v1/index.py

from fastapi import APIRouter

from core.settings import settings

router = APIRouter(tags=["Docs"])


@router.get("/", summary="Service description")
def index():
    return {
        "service": "OLX Scraper API",
        "version": settings.app_version,
        "endpoints": {
            "/scrape": {
                "method": "GET",
                "parameters": {
                    "url": "URL completa do OLX (obrigatória)",
                    "limit": f"Número máximo de resultados (opcional, padrão: {settings.default_limit}, máximo: {settings.max_limit})",
                    "date_from": "Filtrar a partir da data (YYYY-MM-DD ou DD/MM/YYYY)",
                },
                "example": "/scrape?url=https://www.olx.com.br/celulares/iphone&limit=10",
            },
            "/scrape-olx": {
                "method": "GET",
                "parameters": {
                    "q": "Termo de busca (obrigatório)",
                    "state": "Estado (opcional, padrão: mg; 'all' para todo o Brasil)",
                    "category": "Categoria (opcional)",
                    "limit": "Número máximo de resultados",
                    "date_from": "Filtrar a partir da data (YYYY-MM-DD ou DD/MM/YYYY)",
                },
                "example": "/scrape-olx?q=iphone+16&state=sp&category=celulares&limit=15",
            },
            "/health": "Liveness do serviço",
            "/ready": "Teste real de acesso ao OLX (abre o navegador)",
        },
    }
