"""
DevCamper Backend — MapQuest Geocoder Tests
=============================================

What:  Response parsing and error mapping of MapQuestGeocoder.
How:   httpx.MockTransport stands in for the provider; no network access.
"""

import httpx
import pytest

from devcamper.exceptions import GeocodingError
from devcamper.services.geocoder import MapQuestGeocoder

BASE_URL = "https://geocoder.test/geocoding/v1/address"

BOSTON_PAYLOAD = {
    "info": {"statuscode": 0, "messages": []},
    "results": [
        {
            "providedLocation": {"location": "02215"},
            "locations": [
                {
                    "street": "233 Bay State Rd",
                    "adminArea5": "Boston",
                    "adminArea3": "MA",
                    "postalCode": "02215",
                    "adminArea1": "US",
                    "latLng": {"lat": 42.350504, "lng": -71.105399},
                },
                {
                    "street": "",
                    "adminArea5": "Brookline",
                    "adminArea3": "MA",
                    "postalCode": "02446",
                    "adminArea1": "US",
                    "latLng": {"lat": 42.3432, "lng": -71.1217},
                },
            ],
        }
    ],
}


def _geocoder(handler) -> MapQuestGeocoder:
    return MapQuestGeocoder(
        api_key="k",
        base_url=BASE_URL,
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


class TestGeocodeSuccess:

    @pytest.mark.asyncio
    async def test_candidates_in_provider_order(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=BOSTON_PAYLOAD)

        results = await _geocoder(handler).geocode("02215")

        assert seen["params"]["location"] == "02215"
        assert seen["params"]["key"] == "k"
        assert len(results) == 2
        first = results[0]
        assert (first.latitude, first.longitude) == (42.350504, -71.105399)
        assert first.city == "Boston"
        assert first.zipcode == "02215"
        assert first.formatted_address == "233 Bay State Rd, Boston, MA 02215, US"

    @pytest.mark.asyncio
    async def test_blank_street_left_out_of_formatted_address(self):
        results = await _geocoder(lambda r: httpx.Response(200, json=BOSTON_PAYLOAD)).geocode("x")
        assert results[1].street is None
        assert results[1].formatted_address == "Brookline, MA 02446, US"

    @pytest.mark.asyncio
    async def test_no_results_is_empty_list(self):
        payload = {"info": {"statuscode": 0}, "results": [{"locations": []}]}
        results = await _geocoder(lambda r: httpx.Response(200, json=payload)).geocode("00000")
        assert results == []

    @pytest.mark.asyncio
    async def test_locations_without_coordinates_skipped(self):
        payload = {
            "info": {"statuscode": 0},
            "results": [{"locations": [{"adminArea5": "Nowhere"}]}],
        }
        results = await _geocoder(lambda r: httpx.Response(200, json=payload)).geocode("x")
        assert results == []


class TestGeocodeFailures:

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        geocoder = _geocoder(lambda r: httpx.Response(500, text="boom"))
        with pytest.raises(GeocodingError) as exc_info:
            await geocoder.geocode("02215")
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(GeocodingError):
            await _geocoder(handler).geocode("02215")

    @pytest.mark.asyncio
    async def test_provider_status_code(self):
        payload = {"info": {"statuscode": 403, "messages": ["bad key"]}, "results": []}
        with pytest.raises(GeocodingError):
            await _geocoder(lambda r: httpx.Response(200, json=payload)).geocode("02215")

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        with pytest.raises(GeocodingError):
            await _geocoder(lambda r: httpx.Response(200, text="<html>")).geocode("02215")

    @pytest.mark.asyncio
    async def test_no_retry_after_failure(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(502)

        with pytest.raises(GeocodingError):
            await _geocoder(handler).geocode("02215")
        assert len(calls) == 1
