import os
import time
from dataclasses import dataclass

import httpx

QUERY_PAGE_BY_PATH = """
query ($path: String!, $locale: String!) {
  pages {
    singleByPath(path: $path, locale: $locale) {
      id path title content authorName
    }
  }
}
"""

QUERY_PAGE_BY_ID = """
query ($id: Int!) {
  pages {
    single(id: $id) {
      id path title content authorName
    }
  }
}
"""

QUERY_HISTORY = """
query ($id: Int!, $size: Int!) {
  pages {
    history(id: $id, offsetPage: 0, offsetSize: $size) {
      trail { versionId authorName actionType versionDate }
      total
    }
  }
}
"""

QUERY_VERSION = """
query ($pageId: Int!, $versionId: Int!) {
  pages {
    version(pageId: $pageId, versionId: $versionId) {
      content authorName
    }
  }
}
"""

MUTATION_DELETE_PAGE = """
mutation ($id: Int!) {
  pages {
    delete(id: $id) {
      responseResult { succeeded message errorCode slug }
    }
  }
}
"""

QUERY_ASSETS = """
query ($folderId: Int!) {
  assets {
    list(folderId: $folderId, kind: ALL) { id filename ext kind }
  }
}
"""

MUTATION_DELETE_ASSET = """
mutation ($id: Int!) {
  assets {
    deleteAsset(id: $id) {
      responseResult { succeeded message errorCode slug }
    }
  }
}
"""

# Wiki.js GraphQL error codes for missing pages
_NOT_FOUND_MARKERS = ("does not exist", "pagenotfound", "6003")


class WikiError(Exception):
    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


@dataclass
class WikiJSClient:
    base_url: str
    token: str
    locale: str = "en"
    timeout_s: int = 10
    retries: int = 4

    @classmethod
    def from_env(cls):
        base = os.getenv("WIKIJS_BASE_URL", "").rstrip("/")
        tok = os.getenv("WIKIJS_API_TOKEN", "")
        if not base or not tok:
            raise WikiError(503, "Wiki.js env not configured")
        return cls(base, tok, locale=os.getenv("WIKIJS_LOCALE", "en"))

    @property
    def graphql_url(self) -> str:
        return f"{self.base_url}/graphql"

    def _gql(self, query: str, variables: dict | None = None) -> dict:
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }
        payload = {"query": query}
        if variables:
            payload["variables"] = variables

        # retry simple network errors with backoff
        for attempt in range(self.retries):
            try:
                with httpx.Client(timeout=self.timeout_s) as client:
                    resp = client.post(self.graphql_url, json=payload, headers=headers)
                # GraphQL returns 200 for app-level errors; inspect body
                data = resp.json()
                if data.get("errors"):
                    msg = data["errors"][0].get("message", "GraphQL error")
                    raise WikiError(502, f"Wiki.js GraphQL error: {msg}")
                return data["data"]
            except httpx.RequestError as e:
                if attempt == self.retries - 1:
                    raise WikiError(504, f"Network error talking to Wiki.js: {e}") from e
                time.sleep(0.5 * (2 ** attempt))
        raise WikiError(502, "Wiki.js upstream unavailable after retries")

    def _single_or_none(self, query: str, variables: dict, field: str) -> dict | None:
        try:
            data = self._gql(query, variables)
        except WikiError as e:
            msg = (e.message or "").lower()
            if any(marker in msg for marker in _NOT_FOUND_MARKERS):
                return None
            raise
        return (data.get("pages") or {}).get(field)

    def get_page_by_path(self, path: str) -> dict | None:
        return self._single_or_none(QUERY_PAGE_BY_PATH, {"path": path, "locale": self.locale}, "singleByPath")

    def get_page(self, page_id: int) -> dict | None:
        return self._single_or_none(QUERY_PAGE_BY_ID, {"id": page_id}, "single")

    def page_history(self, page_id: int, size: int = 20) -> list[dict]:
        data = self._gql(QUERY_HISTORY, {"id": page_id, "size": size})
        history = (data.get("pages") or {}).get("history") or {}
        return list(history.get("trail") or [])

    def page_version(self, page_id: int, version_id: int) -> dict | None:
        return self._single_or_none(QUERY_VERSION, {"pageId": page_id, "versionId": version_id}, "version")

    def delete_page(self, page_id: int) -> dict:
        data = self._gql(MUTATION_DELETE_PAGE, {"id": page_id})
        return data["pages"]["delete"]["responseResult"]

    def list_assets(self, folder_id: int = 0) -> list[dict]:
        data = self._gql(QUERY_ASSETS, {"folderId": folder_id})
        return list((data.get("assets") or {}).get("list") or [])

    def delete_asset(self, asset_id: int) -> dict:
        data = self._gql(MUTATION_DELETE_ASSET, {"id": asset_id})
        return data["assets"]["deleteAsset"]["responseResult"]
