from __future__ import annotations
import io
import json
import zipfile
from sdkgen.models.schemas import GeneratedSDK
from sdkgen.obs.decorators import timed
from sdkgen.obs.logging_setup import get_logger

logger = get_logger(__name__)

MANIFEST_PATH = "package.json"
README_PATH = "README.md"


def archive_name(sdk: GeneratedSDK) -> str:
    return f"{sdk.provider_name}-sdk.zip"


@timed("sdk_archive_duration_ms")
def build_sdk_zip(sdk: GeneratedSDK) -> bytes:
    """Package every SDK file plus the manifest and README into a deflated ZIP."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=6) as archive:
        for file in sdk.files:
            archive.writestr(file.path.lstrip("/"), file.content)
        archive.writestr(MANIFEST_PATH, json.dumps(sdk.manifest, indent=2))
        archive.writestr(README_PATH, sdk.readme)

    data = buffer.getvalue()
    logger.info("SDK archive created",
               provider_name=sdk.provider_name,
               files=len(sdk.files) + 2,
               size_bytes=len(data))
    return data
