from .assets import AssetLocalizer, iter_urls, rewrite_urls, should_localize, url_reference
from .base import Transform, run_transforms, transform_name, validate_transforms

__all__ = [
    "AssetLocalizer",
    "Transform",
    "iter_urls",
    "rewrite_urls",
    "run_transforms",
    "should_localize",
    "transform_name",
    "url_reference",
]
