"""
API views for diagram lookup.
"""
import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from diagram_lookup.errors import DiagramLookupError, QueryValidationError
from diagram_lookup.pipelines.aggregator import get_diagram_aggregator
from diagram_lookup.serializers import ErrorSerializer, LookupQuerySerializer, ResultBundleSerializer

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
}
CORS_PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _error_response(category: str, message: str, status_code: int) -> Response:
    body = ErrorSerializer({"error": category, "message": message}).data
    return Response(body, status=status_code)


class PublicLookupView(APIView):
    """Read-only endpoint open to any origin."""
    permission_classes = [AllowAny]
    authentication_classes = []

    def finalize_response(self, request, response, *args, **kwargs):
        response = super().finalize_response(request, response, *args, **kwargs)
        for header, value in CORS_HEADERS.items():
            response[header] = value
        return response

    def options(self, request, *args, **kwargs):
        response = Response(status=status.HTTP_200_OK)
        for header, value in CORS_PREFLIGHT_HEADERS.items():
            response[header] = value
        return response


class DiagramLookupView(PublicLookupView):
    """
    GET /api/diagrams/search/?query=photosynthesis

    Response:
    {
        "query": "photosynthesis",
        "images": [
            {
                "title": "Photosynthesis en.svg",
                "thumbUrl": "https://upload.wikimedia.org/...",
                "fullUrl": "https://upload.wikimedia.org/...",
                "mime": "image/svg+xml",
                "author": "...",
                "license": "...",
                "licenseUrl": "..."
            }
        ],
        "total": 1,
        "ts": "2024-01-01T00:00:00+00:00"
    }
    """

    def get(self, request):
        serializer = LookupQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            errors = serializer.errors.get("non_field_errors") or ['Invalid query']
            return _error_response(
                QueryValidationError.category, str(errors[0]), status.HTTP_400_BAD_REQUEST
            )
        query = serializer.validated_data["query"]

        try:
            bundle = get_diagram_aggregator().lookup(query)
        except QueryValidationError as e:
            return _error_response(e.category, e.message, status.HTTP_400_BAD_REQUEST)
        except DiagramLookupError as e:
            logger.error(f"Diagram lookup failed for '{query}': {e}")
            return _error_response(e.category, e.message or "Failed to fetch diagrams", status.HTTP_500_INTERNAL_SERVER_ERROR)
        except Exception as e:
            logger.error(f"Unexpected error during diagram lookup: {e}", exc_info=True)
            return _error_response("internal_error", str(e) or "Unknown error", status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(ResultBundleSerializer(bundle).data)


class HealthCheckView(PublicLookupView):
    """
    GET /api/diagrams/health/?probe=1

    Reports the configured refiner and cache size. With ``probe`` set, also
    runs a small unfiltered Commons search.
    """

    def get(self, request):
        aggregator = get_diagram_aggregator()
        health = {
            "ok": True,
            "services": {
                "query_refiner": {"kind": getattr(aggregator.refiner, "kind", "custom")},
                "cache": {
                    "entries": len(aggregator.cache),
                    "ttl_seconds": aggregator.cache.ttl_seconds,
                },
            },
        }

        if request.query_params.get("probe"):
            try:
                probe = aggregator.client.probe()
                health["services"]["commons"] = {"available": True, **probe}
            except DiagramLookupError as e:
                health["services"]["commons"] = {"available": False, "error": e.message}
                health["ok"] = False

        status_code = status.HTTP_200_OK if health["ok"] else status.HTTP_503_SERVICE_UNAVAILABLE
        return Response(health, status=status_code)
