"""
FastAPI backend for the Nomic bot.
Receives GitHub issue_comment webhooks and runs the weekly hunger job.
"""

import hashlib
import hmac
import logging

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ValidationError

from nomic import __version__, config
from nomic.api.github import GitHubRepository
from nomic.api.scheduler import JobScheduler, hunger_rule
from nomic.engine.famine import process_hunger
from nomic.engine.proposals import ProposalIssue, process_close, process_resolve
from nomic.engine.repository import PlayerRepository, RepositoryError
from nomic.engine.rolls import RollProcessor

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Nomic Bot API",
    description="GitHub webhook receiver and weekly village hunger process for Nomic",
    version=__version__,
)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log method and path so 500s can be traced to the failing endpoint."""
    method = getattr(request, "method", "?")
    url = getattr(request, "url", None)
    path = url.path if url else "?"
    try:
        response = await call_next(request)
        if response.status_code >= 500:
            logger.error("[%d] %s %s", response.status_code, method, path)
        return response
    except Exception:
        logger.exception("[500] %s %s (exception)", method, path)
        raise


# Single repository for the process; it remembers the player file sha between read and write
_repository: PlayerRepository | None = None


def get_repository() -> PlayerRepository:
    """Dependency that returns the game repository."""
    global _repository
    if _repository is None:
        _repository = GitHubRepository()
    return _repository


def run_hunger_job():
    return process_hunger(get_repository(), next_run=hunger_scheduler.describe_next_run)


hunger_scheduler = JobScheduler("Hunger", run_hunger_job, hunger_rule())

# Owns the abuse counters for the lifetime of the process
roll_processor = RollProcessor(max_dice=config.ROLL_MAX_DICE)


# ===== Pydantic Models =====

class GitHubUser(BaseModel):
    login: str


class IssueLabel(BaseModel):
    name: str


class PullRequestRef(BaseModel):
    url: str | None = None


class Issue(BaseModel):
    number: int
    url: str
    title: str = ""
    comments_url: str
    user: GitHubUser
    labels: list[IssueLabel] = []
    pull_request: PullRequestRef | None = None


class Comment(BaseModel):
    body: str = ""
    user: GitHubUser


class IssueCommentEvent(BaseModel):
    action: str
    issue: Issue
    comment: Comment


# ===== Helpers =====

def verify_signature(body: bytes, signature: str | None, secret: str) -> bool:
    """Check GitHub's X-Hub-Signature-256 header ("sha256=<hex hmac>")."""
    if not signature or not signature.startswith("sha256="):
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature[len("sha256="):])


def parse_command(body: str) -> tuple[str, str] | None:
    """(command, instruction line) for comments whose first line starts with a slash command."""
    lines = body.strip().splitlines()
    if not lines:
        return None
    line = lines[0].strip()
    if not line.startswith("/"):
        return None
    return line.split()[0].lower(), line


# ===== API Endpoints =====

@app.on_event("startup")
def on_startup():
    if config.ENABLE_SCHEDULER:
        hunger_scheduler.schedule()


@app.on_event("shutdown")
def on_shutdown():
    hunger_scheduler.cancel()


@app.get("/")
def root():
    return {"message": "Nomic Bot API", "version": __version__}


@app.get("/hunger/next-run")
def hunger_next_run():
    return {"next_run": hunger_scheduler.describe_next_run()}


@app.post("/hunger/run")
def hunger_run(repository: PlayerRepository = Depends(get_repository)):
    """Run the hunger process now instead of waiting for the schedule."""
    try:
        events = hunger_scheduler.run_now(
            lambda: process_hunger(repository, next_run=hunger_scheduler.describe_next_run)
        )
    except RepositoryError as e:
        raise HTTPException(status_code=502, detail=f"Could not load player data: {e}")
    return {"events": [e.to_dict() for e in events]}


@app.post("/webhook")
async def webhook(
    request: Request,
    x_github_event: str | None = Header(default=None),
    x_hub_signature_256: str | None = Header(default=None),
    repository: PlayerRepository = Depends(get_repository),
):
    """GitHub issue_comment webhook: routes /roll, /resolve and /close."""
    body = await request.body()
    if config.WEBHOOK_SECRET and not verify_signature(body, x_hub_signature_256, config.WEBHOOK_SECRET):
        raise HTTPException(status_code=401, detail="Invalid signature")

    if x_github_event == "ping":
        return {"handled": "ping"}
    if x_github_event != "issue_comment":
        return {"handled": None}

    try:
        event = IssueCommentEvent.model_validate_json(body)
    except ValidationError:
        raise HTTPException(status_code=422, detail="Malformed issue_comment payload")
    if event.action != "created":
        return {"handled": None}

    # Repository calls block; keep them off the event loop
    return await run_in_threadpool(handle_comment, repository, event)


def handle_comment(repository: PlayerRepository, event: IssueCommentEvent) -> dict:
    parsed = parse_command(event.comment.body)
    if parsed is None:
        return {"handled": None}
    command, instruction = parsed
    login = event.comment.user.login
    comments_url = event.issue.comments_url

    logger.info("%s from %s on #%d", command, login, event.issue.number)
    try:
        if command == "/roll":
            roll_processor.process_roll(repository, comments_url, login, instruction)
        elif command == "/resolve":
            process_resolve(repository, comments_url, login, ProposalIssue.from_dict(event.issue.model_dump()))
        elif command == "/close":
            process_close(repository, comments_url, login, ProposalIssue.from_dict(event.issue.model_dump()))
        else:
            return {"handled": None}
    except RepositoryError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"handled": command}
