"""GitHub Releases adapter.

Implements release creation and asset upload against the REST API. Neither
call is retried: an existing release makes creation fail, and a failed upload
only costs that platform its asset.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlencode

from tagship.core.result import Err, Ok, Result
from tagship.core.structured import get_str
from tagship.release.config import GITHUB_API_URL
from tagship.release.errors import ReleaseCreationFailed, UploadFailed
from tagship.release.model import Asset, ReleaseHandle, UploadedAsset
from tagship.release.timeouts import GITHUB_UPLOAD_TIMEOUT_SECONDS
from tagship.tools.http import HttpClient

_API_VERSION = "2022-11-28"


def strip_url_template(url: str) -> str:
    """Drop the RFC 6570 suffix GitHub appends, e.g. ``.../assets{?name,label}``."""
    return url.split("{", 1)[0]


class GitHubReleases:
    """Creates releases and uploads assets for one repository."""

    def __init__(
        self,
        *,
        http: HttpClient,
        repo: str,
        token: str,
        api_url: str = GITHUB_API_URL,
    ) -> None:
        self._http = http
        self._repo = repo
        self._token = token
        self._api_url = api_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": _API_VERSION,
        }

    def create_release(self, version: str) -> Result[ReleaseHandle, ReleaseCreationFailed]:
        """Create a release whose tag and title are both the version."""
        url = f"{self._api_url}/repos/{self._repo}/releases"
        result = self._http.post_json(
            url,
            {"tag_name": version, "name": version},
            headers=self._headers(),
        )
        if isinstance(result, Err):
            return Err(
                ReleaseCreationFailed(
                    version=version,
                    status=result.error.status,
                    detail=result.error.message,
                )
            )

        data = result.value
        upload_url = get_str(data, "upload_url")
        release_id = data.get("id")
        if upload_url is None or isinstance(release_id, bool) or not isinstance(release_id, int):
            return Err(
                ReleaseCreationFailed(
                    version=version,
                    status=0,
                    detail="unexpected release payload (missing id or upload_url)",
                )
            )

        return Ok(
            ReleaseHandle(
                version=version,
                release_id=release_id,
                upload_url=strip_url_template(upload_url),
                html_url=get_str(data, "html_url"),
            )
        )

    def upload_asset(
        self, handle: ReleaseHandle, asset: Asset
    ) -> Result[UploadedAsset, UploadFailed]:
        try:
            data = Path(asset.binary_path).read_bytes()
        except OSError as e:
            return Err(
                UploadFailed(
                    platform_name=asset.platform_name,
                    status=0,
                    detail=f"cannot read {asset.binary_path}: {e}",
                )
            )

        url = f"{handle.upload_url}?{urlencode({'name': asset.name})}"
        headers = {**self._headers(), "Content-Type": asset.content_type}
        result = self._http.post_bytes(
            url, data, headers=headers, timeout=GITHUB_UPLOAD_TIMEOUT_SECONDS
        )
        if isinstance(result, Err):
            return Err(
                UploadFailed(
                    platform_name=asset.platform_name,
                    status=result.error.status,
                    detail=result.error.message,
                )
            )

        payload = result.value
        size = payload.get("size")
        return Ok(
            UploadedAsset(
                name=get_str(payload, "name") or asset.name,
                size=size if isinstance(size, int) and not isinstance(size, bool) else len(data),
                download_url=get_str(payload, "browser_download_url"),
            )
        )
