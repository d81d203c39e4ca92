# IsThereAnyDeal API Client
# Looks up a Steam product on IsThereAnyDeal and downloads its price history.
# References:
# - https://docs.isthereanydeal.com/
import logging
import httpx
from pydantic import ValidationError
from typing import Any, Optional

from price_history_proxy.custom_errors import AnyDealAPIError
from price_history_proxy.types.any_deal import GidLookup, HistoryLowItem, LowPrice

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

class AnyDealAPI():
    """
    A client for interacting with the IsThereAnyDeal API.
    Provides methods to resolve a game id and fetch its pricing history.
    """

    # API Configuration
    ANY_DEAL_BASE_URL = 'https://api.isthereanydeal.com'

    # API Endpoints
    LOOKUP_ENDPOINT = 'lookup/id/shop/{shop_id}/v1'
    HISTORY_LOW_ENDPOINT = 'games/historylow/v1'
    HISTORY_ENDPOINT = 'games/history/v2'

    # Shop IDs (Steam is 61)
    STEAM_SHOP_ID = 61

    # Every price is requested for this country
    REGION = 'AR'

    DEFAULT_TIMEOUT = 5.0

    def __init__(
        self,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize AnyDeal API client.

        Args:
            api_key: The IsThereAnyDeal API key for authentication
            timeout: Seconds to wait on each upstream call
            transport: Optional httpx transport, used to stub the API

        Raises:
            ValueError: If api_key is empty or None
        """
        if not api_key or not api_key.strip():
            raise ValueError("API key cannot be empty or None")

        self.api_key = api_key.strip()
        self.shop_id = self.STEAM_SHOP_ID
        self.region = self.REGION
        self.session = httpx.AsyncClient(
            base_url=self.ANY_DEAL_BASE_URL,
            timeout=timeout,
            transport=transport,
            headers={
                'User-Agent': 'AnyDeal-API-Client/1.0',
                'Accept': 'application/json'
            }
        )

    async def lookup_gid(self, shop_game_id: str) -> GidLookup:
        """
        Map a Steam store id (e.g. "app/620") to the IsThereAnyDeal game id.

        Returns:
            GidLookup that is FOUND, NOT_FOUND or UPSTREAM_FAILURE. Never raises
            for upstream errors.
        """
        url = self.LOOKUP_ENDPOINT.format(shop_id=self.shop_id)
        try:
            result = await self._make_request('POST', url, 'GID', json=[shop_game_id])
        except AnyDealAPIError as e:
            logger.error(f"GID lookup failed for {shop_game_id}: {e}")
            return GidLookup.failed(e.message)

        if not isinstance(result, dict):
            logger.error(f"Unexpected GID lookup response for {shop_game_id}")
            return GidLookup.failed("GID invalid response")

        gid = result.get(shop_game_id)
        if not gid:
            logger.warning(f"No GID for {shop_game_id}")
            return GidLookup.not_found()

        return GidLookup.found(str(gid))

    async def get_historical_low(self, gid: str) -> Optional[LowPrice]:
        """
        Lowest price ever recorded for the game in REGION.

        Returns: the low price, None if IsThereAnyDeal has no low for this region
        Raises:
            AnyDealAPIError if the request fails
        """
        result = await self._make_request(
            'POST',
            self.HISTORY_LOW_ENDPOINT,
            'Regional low',
            json=[gid],
            params={'country': self.region}
        )

        if not isinstance(result, list) or len(result) == 0:
            logger.warning(f"Empty regional low for {gid}")
            return None

        try:
            item = HistoryLowItem.model_validate(result[0])
        except ValidationError as e:
            logger.warning(f"Invalid regional low for {gid}: {e}")
            return None

        if item.low is None or item.low.price.amount is None:
            logger.warning(f"Empty regional low for {gid}")
            return None
        return item.low

    async def get_history(self, gid: str) -> list[dict[str, Any]]:
        """
        Full deal history of the game on Steam in REGION, in no particular order.

        Raises:
            AnyDealAPIError if the request fails
        """
        params = {
            'id': gid,
            'country': self.region,
            'shops': self.shop_id
        }
        result = await self._make_request('GET', self.HISTORY_ENDPOINT, 'History', params=params)

        if not isinstance(result, list):
            logger.warning(f"Unexpected history response for {gid}")
            return []
        return result

    async def _make_request(self, method: str, url: str, label: str, params: Optional[dict[str, Any]] = None, **kwargs) -> Any:
        """
            Sends an authenticated request to the API.

            Returns: decoded JSON body.
            Raises:
                AnyDealAPIError on error status, timeout, transport failure or invalid JSON
        """
        request_params = {'key': self.api_key, **(params or {})}
        try:
            response = await self.session.request(method, url, params=request_params, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"Failed to retrieve data from {url}: status {status_code}")
            raise AnyDealAPIError.from_status(label, status_code) from e
        except httpx.TimeoutException as e:
            logger.error(f"Request to {url} timed out")
            raise AnyDealAPIError(label, "timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Failed to retrieve data from {url}: {type(e).__name__}")
            raise AnyDealAPIError(label, "request failed") from e
        except ValueError as e:
            logger.error(f"Invalid JSON response from {url}")
            raise AnyDealAPIError(label, "invalid JSON") from e

    def get_base_url(self) -> str:
        return self.ANY_DEAL_BASE_URL

    async def aclose(self):
        await self.session.aclose()
