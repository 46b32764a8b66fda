"""Dual-mode tool bridge.

Routes each validated tool call either to the live Replit API or to the
simulation engine, depending on the BridgeMode fixed at construction, and
wraps whichever backend answered into a single ToolResult envelope.

Real-mode failures are surfaced as BridgeError; the bridge never falls back
to simulation when the live API is configured.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from src.adapters.workspace_backend import WorkspaceBackend
from src.core.config import BridgeMode, Settings
from src.core.errors import BridgeError, UnknownOperation
from src.core.replit_client import RemoteSession, ReplitClient
from src.core.schemas import ToolResult
from src.replit import formatting
from src.replit.catalog import OperationName
from src.replit.remote_backend import RemoteBackend
from src.replit.simulation import SimulationEngine


logger = logging.getLogger(__name__)

Call = Callable[[WorkspaceBackend, Mapping[str, Any]], Dict[str, Any]]
Formatter = Callable[..., str]
RemoteFactory = Callable[[RemoteSession], WorkspaceBackend]


def _create_project(backend: WorkspaceBackend, args: Mapping[str, Any]) -> Dict[str, Any]:
    return backend.create_project(title=args["title"], language=args["language"], visibility=args["visibility"])


def _update_file(backend: WorkspaceBackend, args: Mapping[str, Any]) -> Dict[str, Any]:
    return backend.update_file(repl_id=args["replId"], file_path=args["filePath"], content=args["content"])


def _deploy_project(backend: WorkspaceBackend, args: Mapping[str, Any]) -> Dict[str, Any]:
    return backend.deploy_project(repl_id=args["replId"], command=args.get("command"))


def _get_deployment_status(backend: WorkspaceBackend, args: Mapping[str, Any]) -> Dict[str, Any]:
    return backend.get_deployment_status(repl_id=args["replId"])


def _review_commits(backend: WorkspaceBackend, args: Mapping[str, Any]) -> Dict[str, Any]:
    return backend.review_commits(repl_id=args["replId"], limit=args["limit"])


HANDLERS: Dict[OperationName, Tuple[Call, Formatter]] = {
    OperationName.CREATE_PROJECT: (_create_project, formatting.format_create_project),
    OperationName.UPDATE_FILE: (_update_file, formatting.format_update_file),
    OperationName.DEPLOY_PROJECT: (_deploy_project, formatting.format_deploy_project),
    OperationName.GET_DEPLOYMENT_STATUS: (_get_deployment_status, formatting.format_deployment_status),
    OperationName.REVIEW_COMMITS: (_review_commits, formatting.format_review_commits),
}


class ToolBridge:
    def __init__(
        self,
        mode: BridgeMode,
        *,
        simulation: Optional[SimulationEngine] = None,
        remote_factory: Optional[RemoteFactory] = None,
        timeout_s: float = 10.0,
        graphql_url: Optional[str] = None,
        rest_url: Optional[str] = None,
        handlers: Optional[Dict[OperationName, Tuple[Call, Formatter]]] = None,
    ):
        self.mode = mode
        self.timeout_s = timeout_s
        self._graphql_url = graphql_url
        self._rest_url = rest_url
        self._simulation = simulation or SimulationEngine()
        self._remote_factory = remote_factory or (lambda session: RemoteBackend(ReplitClient(session, timeout_s=timeout_s)))

        self._handlers = dict(handlers if handlers is not None else HANDLERS)
        missing = [op.value for op in OperationName if op not in self._handlers]
        if missing:
            raise RuntimeError(f"No handler registered for operations: {', '.join(missing)}")

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "ToolBridge":
        if "simulation" not in kwargs:
            rng = random.Random(settings.simulation_seed) if settings.simulation_seed is not None else None
            kwargs["simulation"] = SimulationEngine(rng=rng)
        if "remote_factory" not in kwargs:
            kwargs["remote_factory"] = lambda session: RemoteBackend(
                ReplitClient(session, timeout_s=settings.http_timeout_seconds),
                log_limit=settings.deploy_log_limit,
            )
        return cls(
            settings.bridge_mode,
            timeout_s=settings.http_timeout_seconds,
            graphql_url=settings.graphql_url,
            rest_url=settings.replit_rest_url,
            **kwargs,
        )

    @property
    def simulated(self) -> bool:
        return self.mode is BridgeMode.SIMULATED

    def session_for(self, access_token: Optional[str]) -> Optional[RemoteSession]:
        if not access_token:
            return None
        kwargs: Dict[str, str] = {}
        if self._graphql_url:
            kwargs["graphql_url"] = self._graphql_url
        if self._rest_url:
            kwargs["rest_url"] = self._rest_url
        return RemoteSession(access_token=access_token, **kwargs)

    async def execute(self, name: str, args: Mapping[str, Any], session: Optional[RemoteSession] = None) -> ToolResult:
        """Run one validated tool call and wrap the outcome.

        Raises:
            UnknownOperation: `name` is not a catalog operation.
            BridgeError: the backend failed, timed out, or no session was
                supplied in real mode.
        """
        op = OperationName.lookup(name)
        if op is None:
            raise UnknownOperation(name)
        call, formatter = self._handlers[op]

        if self.simulated:
            backend: WorkspaceBackend = self._simulation
            payload = call(backend, args)
        else:
            if session is None:
                raise BridgeError(operation=name, cause=PermissionError("a Replit access token is required for live calls"))
            backend = self._remote_factory(session)
            payload = await self._call_remote(name, call, backend, args)

        payload = {**payload, "simulated": backend.simulated}
        logger.info("Tool call completed", extra={"tool": name, "mode": self.mode.value})
        return ToolResult.from_payload(formatter(payload, simulated=backend.simulated), payload)

    async def _call_remote(self, name: str, call: Call, backend: WorkspaceBackend, args: Mapping[str, Any]) -> Dict[str, Any]:
        """Run a blocking backend call in a worker thread, bounded by `timeout_s`.

        The timeout only stops waiting: the worker thread cannot be cancelled,
        so a write (updateFile, deployReplitProject) may still reach Replit
        after the caller has received BridgeError. Each HTTP request inside the
        call also carries its own `requests` timeout; a live deploy without an
        explicit command makes two sequential requests (repl lookup, exec).
        """
        try:
            return await asyncio.wait_for(asyncio.to_thread(call, backend, args), timeout=self.timeout_s)
        except asyncio.TimeoutError as e:
            logger.error("Replit call timed out", extra={"tool": name, "timeout_s": self.timeout_s})
            raise BridgeError(operation=name, cause=TimeoutError(
                f"Replit call timed out after {self.timeout_s:g}s; the request may still complete on Replit"
            )) from e
        except Exception as e:
            logger.error("Replit call failed", extra={"tool": name, "error": str(e)})
            raise BridgeError(operation=name, cause=e) from e
