"""
GitHub REST v3 implementation of PlayerRepository.
The player file is read and written through the contents API; issues,
comments and merges go through the issues/pulls endpoints.
"""

import base64
import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from nomic import config
from nomic.engine.repository import HUNGER_LABEL, PlayerRepository, RepositoryError
from nomic.engine.state import FamineNotice, PlayerData

logger = logging.getLogger(__name__)

USER_AGENT = "nomic-bot"


class GitHubRepository(PlayerRepository):
    def __init__(
        self,
        token: str = config.GITHUB_TOKEN,
        repository: str = config.GITHUB_REPOSITORY,
        player_file_path: str = config.PLAYER_FILE_PATH,
        branch: str = config.PLAYER_FILE_BRANCH,
        api_url: str = config.GITHUB_API_URL,
        timeout: float = 10,
    ):
        self.token = token
        self.repository = repository
        self.player_file_path = player_file_path
        self.branch = branch
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        # Blob sha of the player file as last read; required to update it
        self._player_file_sha: str | None = None

    # ----- HTTP -----

    def _endpoint(self, endpoint: str) -> str:
        return f"{self.api_url}/repos/{self.repository}/{endpoint}"

    def request(
        self,
        method: str,
        url: str,
        data: dict[str, Any] | None = None,
        query: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and decode the JSON response (None for an empty body)."""
        if query:
            url = f"{url}?{urllib.parse.urlencode(query)}"
        body = json.dumps(data).encode("utf-8") if data is not None else None
        req = urllib.request.Request(url, data=body, method=method)
        req.add_header("Accept", "application/vnd.github+json")
        req.add_header("User-Agent", USER_AGENT)
        if body is not None:
            req.add_header("Content-Type", "application/json")
        if self.token:
            req.add_header("Authorization", f"token {self.token}")

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            raise RepositoryError(f"{method} {url} returned {e.code}: {e.reason}") from e
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            raise RepositoryError(f"{method} {url} failed: {e}") from e

        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise RepositoryError(f"{method} {url} returned invalid JSON") from e

    # ----- Player file -----

    def get_player_data(self) -> PlayerData:
        content = self.request(
            "GET",
            self._endpoint(f"contents/{self.player_file_path}"),
            query={"ref": self.branch},
        )
        if not isinstance(content, dict) or "content" not in content:
            raise RepositoryError(f"{self.player_file_path} is not a file")
        self._player_file_sha = content.get("sha")
        try:
            raw = json.loads(base64.b64decode(content["content"]))
        except (ValueError, TypeError) as e:
            raise RepositoryError(f"{self.player_file_path} does not hold valid JSON") from e
        return PlayerData.from_dict(raw)

    def update_player_file(self, player_data: PlayerData, message: str) -> None:
        if self._player_file_sha is None:
            # Never read in this process; fetch the current sha first
            self.get_player_data()
        text = json.dumps(player_data.to_dict(), indent=2) + "\n"
        result = self.request("PUT", self._endpoint(f"contents/{self.player_file_path}"), data={
            "message": message,
            "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
            "sha": self._player_file_sha,
            "branch": self.branch,
        })
        if isinstance(result, dict):
            self._player_file_sha = (result.get("content") or {}).get("sha", self._player_file_sha)
        logger.info("Updated %s: %s", self.player_file_path, message)

    # ----- Issues -----

    def post_comment(self, comments_url: str, body: str) -> None:
        self.request("POST", comments_url, data={"body": body})

    def close_issue(self, issue_url: str, labels: list[str] | None = None) -> None:
        data: dict[str, Any] = {"state": "closed"}
        if labels is not None:
            data["labels"] = labels
        self.request("PATCH", issue_url, data=data)

    def create_famine_notice(self, login: str, title: str, body: str) -> FamineNotice:
        issue = self.request("POST", self._endpoint("issues"), data={
            "title": title,
            "body": body,
            "assignee": login,
            "labels": [HUNGER_LABEL],
        })
        return FamineNotice.from_issue(issue or {})

    def list_open_famine_notices(self) -> list[FamineNotice]:
        issues = self.request("GET", self._endpoint("issues"), query={
            "labels": HUNGER_LABEL,
            "state": "open",
            "per_page": 100,
        })
        return [FamineNotice.from_issue(issue) for issue in issues or [] if isinstance(issue, dict)]

    def merge_pull_request(self, pull_request_url: str, commit_title: str, commit_message: str) -> None:
        pull_request = self.request("GET", pull_request_url)
        if not isinstance(pull_request, dict):
            raise RepositoryError(f"Pull request not found: {pull_request_url}")
        head = pull_request.get("head")
        head_sha = head.get("sha") if isinstance(head, dict) else None
        if not head_sha:
            raise RepositoryError(f"Pull request has no head commit: {pull_request_url}")
        self.request("PUT", (pull_request.get("url") or pull_request_url) + "/merge", data={
            "commit_title": commit_title,
            "commit_message": commit_message,
            "sha": head_sha,
        })
