"""
DevCamper Backend — MapQuest Geocoding Service
================================================

What:  Resolves postal codes and street addresses to coordinates through the
       MapQuest Geocoding API.
How:   One GET per lookup with httpx.AsyncClient. The response's first
       result block lists candidate locations; each becomes a GeocodeResult.
Who:   BootcampService.

Failure handling:
    Network errors, HTTP errors and a non-zero MapQuest status code all become
    GeocodingError (503). Nothing is retried or cached.

Example provider response (trimmed):
    {
      "info": {"statuscode": 0, "messages": []},
      "results": [{
        "locations": [{
          "street": "233 Bay State Rd", "adminArea5": "Boston",
          "adminArea3": "MA", "postalCode": "02215", "adminArea1": "US",
          "latLng": {"lat": 42.350504, "lng": -71.105399}
        }]
      }]
    }
"""

import logging
import time
import uuid
from typing import Any, Dict, List, Optional

import httpx

from devcamper.config import settings
from devcamper.exceptions import GeocodingError
from devcamper.services.geocoder_base import GeocodeResult, Geocoder

logger = logging.getLogger(__name__)


class MapQuestGeocoder(Geocoder):
    """
    Geocoder backed by the MapQuest address endpoint.

    The transport argument lets tests plug in httpx.MockTransport instead of
    reaching the network.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.geocoder_api_key
        self.base_url = base_url or settings.geocoder_base_url
        self.timeout = timeout or settings.geocoder_timeout
        self.transport = transport

    async def geocode(self, query: str) -> List[GeocodeResult]:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()
        logger.info("[%s] Geocoding %r", request_id, query)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(
                    self.base_url,
                    params={"key": self.api_key, "location": query, "maxResults": 5},
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "[%s] Geocoder returned HTTP %d", request_id, e.response.status_code
            )
            raise GeocodingError(
                context={"request_id": request_id, "status": e.response.status_code},
            )
        except httpx.HTTPError as e:
            logger.error("[%s] Geocoder unreachable: %s", request_id, str(e))
            raise GeocodingError(
                context={"request_id": request_id, "error_type": type(e).__name__},
            )
        except ValueError as e:
            # Body was not JSON
            logger.error("[%s] Geocoder sent an unreadable body: %s", request_id, str(e))
            raise GeocodingError(context={"request_id": request_id})

        info = payload.get("info") or {}
        status_code = info.get("statuscode", 0)
        if status_code != 0:
            logger.error(
                "[%s] Geocoder status %s: %s",
                request_id,
                status_code,
                "; ".join(info.get("messages") or []),
            )
            raise GeocodingError(
                context={"request_id": request_id, "provider_status": status_code},
            )

        results = self._parse_locations(payload)
        logger.info(
            "[%s] Geocoded %r to %d candidate(s) in %.0fms",
            request_id,
            query,
            len(results),
            (time.perf_counter() - start_time) * 1000,
        )
        return results

    @staticmethod
    def _parse_locations(payload: Dict[str, Any]) -> List[GeocodeResult]:
        blocks = payload.get("results") or []
        if not blocks:
            return []

        results = []
        for location in blocks[0].get("locations") or []:
            lat_lng = location.get("latLng") or {}
            if "lat" not in lat_lng or "lng" not in lat_lng:
                continue
            street = location.get("street") or None
            city = location.get("adminArea5") or None
            state = location.get("adminArea3") or None
            zipcode = location.get("postalCode") or None
            country = location.get("adminArea1") or None
            region = " ".join(part for part in (state, zipcode) if part)
            formatted = ", ".join(part for part in (street, city, region, country) if part)
            results.append(
                GeocodeResult(
                    latitude=float(lat_lng["lat"]),
                    longitude=float(lat_lng["lng"]),
                    formatted_address=formatted or None,
                    street=street,
                    city=city,
                    state=state,
                    zipcode=zipcode,
                    country=country,
                )
            )
        return results


geocoder_service = MapQuestGeocoder()
