import logging
import urllib.parse
from typing import Any, Optional, Tuple

from app.services.normalizer import has_image_asset

logger = logging.getLogger(__name__)

CDN_BASE_URL = "https://cdn.sanity.io/images"
PLACEHOLDER_IMAGE = "/static/default-og.png"
FIT_MODES = ("clip", "crop", "fill", "fillmax", "max", "scale", "min")


class ImageUrlBuilder:
    def __init__(self, project_id: str, dataset: str, base_url: str = CDN_BASE_URL):
        self.project_id = project_id
        self.dataset = dataset
        self.base_url = base_url.rstrip("/")

    def url(
        self, source: Any, width: int, height: int, fit: str = "crop"
    ) -> Optional[str]:
        """
        Build a CDN URL for an image record, or None when the record
        carries no asset or the URL cannot be built.
        """
        if not has_image_asset(source):
            return None
        try:
            return self._build(source, width, height, fit)
        except Exception as e:
            logger.debug(f"Could not build image URL for {source!r}: {e}")
            return None

    def _build(self, source: dict, width: int, height: int, fit: str) -> str:
        if not self.project_id or not self.dataset:
            raise ValueError("Image builder is not configured")
        if fit not in FIT_MODES:
            raise ValueError(f"Unsupported fit mode: {fit}")

        asset_id, (orig_w, orig_h), fmt = parse_asset_ref(source["asset"]["_ref"])

        params = []
        rect = _crop_rect(source.get("crop"), orig_w, orig_h)
        if rect:
            params.append(("rect", ",".join(str(v) for v in rect)))
        params.append(("w", str(int(width))))
        params.append(("h", str(int(height))))
        params.append(("fit", fit))

        filename = f"{asset_id}-{orig_w}x{orig_h}.{fmt}"
        return (
            f"{self.base_url}/{self.project_id}/{self.dataset}/{filename}"
            f"?{urllib.parse.urlencode(params, safe=',')}"
        )


def parse_asset_ref(ref: str) -> Tuple[str, Tuple[int, int], str]:
    """
    Split "image-<id>-<width>x<height>-<format>" into its parts.
    """
    prefix, _, rest = ref.partition("-")
    if prefix != "image" or not rest:
        raise ValueError(f"Malformed image asset ref: {ref}")

    try:
        asset_id, dimensions, fmt = rest.rsplit("-", 2)
        width, height = (int(v) for v in dimensions.split("x"))
    except ValueError:
        raise ValueError(f"Malformed image asset ref: {ref}")

    if not asset_id or not fmt or width <= 0 or height <= 0:
        raise ValueError(f"Malformed image asset ref: {ref}")
    return asset_id, (width, height), fmt


def _crop_rect(crop: Any, width: int, height: int) -> Optional[Tuple[int, int, int, int]]:
    if not isinstance(crop, dict):
        return None
    try:
        left = float(crop.get("left") or 0)
        top = float(crop.get("top") or 0)
        right = float(crop.get("right") or 0)
        bottom = float(crop.get("bottom") or 0)
    except (TypeError, ValueError):
        return None

    if not any((left, top, right, bottom)):
        return None

    x = round(left * width)
    y = round(top * height)
    w = round(width - right * width - x)
    h = round(height - bottom * height - y)
    if w <= 0 or h <= 0:
        return None
    return x, y, w, h
