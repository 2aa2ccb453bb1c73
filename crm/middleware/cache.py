"""Cache-Control headers for read endpoints"""

from fastapi import Response

CACHE_PROFILES = {
    "short": "public, max-age=30, s-maxage=60",
    "medium": "public, max-age=60, s-maxage=120",
    "long": "public, max-age=300, s-maxage=600",
    "none": "no-cache, no-store, must-revalidate",
}


def cache_control(profile: str):
    """
    Dependency factory setting Cache-Control for a route.

    Usage:
        @router.get("", dependencies=[Depends(cache_control("short"))])
    """
    if profile not in CACHE_PROFILES:
        raise ValueError(f"Unknown cache profile: {profile}")
    value = CACHE_PROFILES[profile]

    async def set_cache_headers(response: Response) -> None:
        response.headers["Cache-Control"] = value
        response.headers["Vary"] = "Accept-Encoding"

    return set_cache_headers
