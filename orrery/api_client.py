import logging

import requests

logger = logging.getLogger(__name__)

USER_AGENT = "orrery-python-client"


def _parse_star(entry):
    name = str(entry.get("name", "")).strip()
    x, y, z = float(entry["x"]), float(entry["y"]), float(entry["z"])
    magnitude = entry.get("mag", entry.get("magnitude"))
    return {
        "name": name,
        "x": x, "y": y, "z": z,
        "mag": float(magnitude) if magnitude is not None else None,
    }


def fetch_star_catalogue(url, timeout=15):
    """
    Downloads a star catalogue (JSON) from a remote server.

    The payload is either a list of stars or an object with a 'stars' list. Each
    star has 'name', 'x', 'y', 'z' (parsecs, equatorial J2000) and an optional
    'mag'. Stars that are missing coordinates are skipped.

    A failed download never takes the orrery down with it: any network or format
    problem is logged and an empty list comes back.

    Returns:
        list: Star dicts with name, x, y, z, mag.
    """
    if not url:
        logger.warning("No star catalogue URL given")
        return []

    logger.info("Fetching star catalogue from %s", url)
    try:
        response = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except requests.exceptions.HTTPError as e:
        logger.error("HTTP error fetching star catalogue: %s", e)
        return []
    except requests.exceptions.ConnectionError as e:
        logger.error("Could not connect to star catalogue server: %s", e)
        return []
    except requests.exceptions.Timeout as e:
        logger.error("Star catalogue request timed out: %s", e)
        return []
    except ValueError as e:
        logger.error("Star catalogue is not valid JSON: %s", e)
        return []

    if isinstance(payload, dict):
        payload = payload.get("stars", [])
    if not isinstance(payload, list):
        logger.error("Star catalogue has an unexpected structure (%s)", type(payload).__name__)
        return []

    stars = []
    for entry in payload:
        try:
            stars.append(_parse_star(entry))
        except (KeyError, TypeError, ValueError):
            continue
    logger.info("Fetched %d stars (%d skipped)", len(stars), len(payload) - len(stars))
    return stars
