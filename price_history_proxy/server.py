import uvicorn
import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse
from typing import Optional

from price_history_proxy.any_deal_api import AnyDealAPI
from price_history_proxy.price_stats import PriceStats, StatsOutcome
from price_history_proxy.proxy_config import ProxyConfig
from price_history_proxy.types.stats import ErrorResponse, StatsStatus

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

config = ProxyConfig()
any_deal: Optional[AnyDealAPI] = None

@asynccontextmanager
async def lifespan(app: FastAPI):
    global any_deal
    if config.has_api_key:
        any_deal = AnyDealAPI(config.api_key, timeout=config.request_timeout)
    else:
        logger.error('ITAD_API_KEY is not configured, price history requests will fail.')

    yield
    if any_deal is not None:
        await any_deal.aclose()
        any_deal = None

app = FastAPI(lifespan=lifespan)

@app.middleware('http')
async def add_cors_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in config.cors_headers().items():
        response.headers[name] = value
    return response

def get_any_deal() -> Optional[AnyDealAPI]:
    return any_deal

@app.api_route('/api/get-stats', methods=['GET', 'OPTIONS'])
async def get_stats(
    request: Request,
    shop_id: Optional[str] = Query(None, alias='shopID'),
    client: Optional[AnyDealAPI] = Depends(get_any_deal)
):
    """
        Price history summary of a Steam product.

        Returns: ResultData on success, {status, message} otherwise.
    """
    if request.method == 'OPTIONS':
        return Response(status_code=200)

    if client is None:
        logger.error('Error: ITAD_API_KEY is not configured.')
        return error_response(500, StatsStatus.API_ERROR, 'Internal server error.')

    if not shop_id:
        return error_response(400, StatsStatus.API_ERROR, 'Missing shopID parameter.')

    try:
        result = await PriceStats(client).fetch_historical_stats(shop_id)
    except Exception as error:
        logger.error(f'Fatal error fetching historical stats for {shop_id}: {error}')
        return error_response(500, StatsStatus.API_ERROR, f'proxy error: {error}')

    if result.outcome is StatsOutcome.NO_HISTORY:
        return error_response(200, StatsStatus.NO_HISTORY, result.message)
    if result.outcome is StatsOutcome.UPSTREAM_FAILURE:
        return error_response(500, StatsStatus.API_ERROR, f'proxy error: {result.message}')

    return JSONResponse(status_code=200, content=result.data.model_dump(mode='json', by_alias=True))

@app.get('/api/health')
async def health(client: Optional[AnyDealAPI] = Depends(get_any_deal)):
    return {'status': 'ok', 'configured': client is not None}

def error_response(status_code: int, status: StatsStatus, message: str) -> JSONResponse:
    body = ErrorResponse(status=status, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode='json'))

def main():
    logger.info(f'Server at http://localhost:{config.port}')
    uvicorn.run('price_history_proxy.server:app', host=config.host, port=config.port)

if __name__ == '__main__':
    main()
