import asyncio
import logging
import signal
from typing import Any

from dotenv import load_dotenv
from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from capsets import format_set
from catalog import ProfileCatalog
from config import ServerConfig
from hierarchy import (
    CapabilityRequirements,
    DerivedNode,
    HierarchyGraph,
    filtered_view,
    render_hierarchy,
    render_view,
    simplified_view,
)
from runtime import HierarchyCache

logger = logging.getLogger(__name__)

load_dotenv()


class ProfileHierarchyServer:
    def __init__(self, config: ServerConfig, cache: HierarchyCache | None = None) -> None:
        self.config = config
        self.server = FastMCP()
        self.cache = cache if cache is not None else HierarchyCache()
        self._shutdown_requested = False

        self.catalog = ProfileCatalog(self.config.manifest_path)

    def signal_handler(self, sig: int, frame: Any = None) -> None:
        """Handle termination signals for graceful shutdown."""
        logger.info("Received signal %s, initiating graceful shutdown...", sig)
        self._shutdown_requested = True

    async def get_hierarchy(self) -> HierarchyGraph:
        entries = self.catalog.entries()
        return await self.cache.get_or_build(str(self.config.manifest_path), lambda: HierarchyGraph.create(entries))

    async def profile_hierarchy(self) -> str:
        title = "Profile Hierarchy"
        if self._shutdown_requested:
            return self._format_error_markdown(title, "server is shutting down")

        try:
            graph = await self.get_hierarchy()
            lines = [f"## {title}", "", f"- Profiles: `{len(graph)}`", f"- Roots: `{len(graph.roots)}`", ""]
            lines.extend(render_hierarchy(graph.root))
            return "\n".join(lines)
        except Exception as exc:
            logger.exception("profile_hierarchy internal exception")
            return self._format_error_markdown(title, f"hierarchy internal exception: {exc}")

    async def simplified_hierarchy(self) -> str:
        title = "Simplified Profile Hierarchy"
        if self._shutdown_requested:
            return self._format_error_markdown(title, "server is shutting down")

        try:
            graph = await self.get_hierarchy()
            nodes = simplified_view(graph.root)
            return self._format_view_markdown(title, nodes, [])
        except Exception as exc:
            logger.exception("simplified_hierarchy internal exception")
            return self._format_error_markdown(title, f"hierarchy internal exception: {exc}")

    async def check_requirements(
        self,
        capabilities: list[str],
        hide_unsupported: bool | None = None,
    ) -> str:
        title = "Requirement Check"
        if self._shutdown_requested:
            return self._format_error_markdown(title, "server is shutting down")

        requirements = CapabilityRequirements(capabilities)
        if not requirements.required_names:
            return self._format_error_markdown(title, "args validation failure: no capabilities given")

        hide = self.config.hide_unsupported if hide_unsupported is None else hide_unsupported
        try:
            graph = await self.get_hierarchy()
            nodes = await filtered_view(graph.root, requirements, hide_unsupported=hide)
            header = [
                f"- Required capabilities: `{len(requirements.required_names)}`",
                f"- Hide unsupported: `{str(hide).lower()}`",
            ]
            return self._format_view_markdown(title, nodes, header)
        except Exception as exc:
            logger.exception("check_requirements internal exception")
            return self._format_error_markdown(title, f"hierarchy internal exception: {exc}")

    async def read_profile(self, name: str) -> str:
        title = f"Profile: `{name}`"
        doc = await asyncio.to_thread(self.catalog.read, name)
        if doc is None:
            return self._format_error_markdown(title, f"unknown profile: {name}")

        lines = [f"## {title}", ""]
        if doc.description:
            lines.extend([doc.description, ""])
        entry = self.catalog.entry(name)
        if entry is not None:
            lines.append(f"- Supported set: `{format_set(entry.supported_set())}`")
        lines.append(f"- Capabilities: `{len(doc.capabilities)}`")
        lines.extend([f"  - {capability}" for capability in sorted(doc.capabilities)])
        return "\n".join(lines)

    @staticmethod
    def _format_view_markdown(title: str, nodes: list[DerivedNode], header: list[str]) -> str:
        lines = [f"## {title}", "", *header, f"- Top-level profiles: `{len(nodes)}`", ""]
        if not nodes:
            lines.append("No profiles remain in this view.")
            return "\n".join(lines)
        lines.extend(render_view(nodes))
        return "\n".join(lines)

    @staticmethod
    def _format_error_markdown(title: str, message: str) -> str:
        return "\n".join([f"## {title}", "", "### Error", "```text", message, "```"])

    def _register_tools(self) -> None:
        tools = [
            (self.profile_hierarchy, "profile_hierarchy", "Show every known profile arranged by superset relation."),
            (self.simplified_hierarchy, "simplified_hierarchy", "Show the profile hierarchy with single-child chains collapsed."),
            (
                self.check_requirements,
                "check_requirements",
                "List the profiles that declare every given capability name.",
            ),
            (self.read_profile, "read_profile", "Read one profile's declared capabilities by name."),
        ]

        for tool_func, tool_name, description in tools:
            self.server.tool(tool_func, name=tool_name, description=description)
            logger.info("Registered tool: %s", tool_name)

    def _register_health_endpoints(self) -> None:
        @self.server.custom_route("/health", methods=["GET"])
        async def health_check(request: Request) -> Response:
            return JSONResponse({"status": "ok", "service": "profile-hierarchy"})

        @self.server.custom_route("/ready", methods=["GET"])
        async def readiness_check(request: Request) -> Response:
            try:
                if not self.config.manifest_path.exists():
                    return JSONResponse(
                        {"status": "not_ready", "reason": f"manifest_missing:{self.config.manifest_path}"},
                        status_code=503,
                    )

                return JSONResponse(
                    {
                        "status": "ready",
                        "service": "profile-hierarchy",
                        "profiles": len(self.catalog),
                    }
                )
            except Exception as exc:
                logger.error("Readiness check failed: %s", exc)
                return JSONResponse({"status": "error", "reason": str(exc)}, status_code=503)

    async def _run_server(self) -> None:
        tasks = [
            self.server.run_http_async(
                transport="streamable-http",
                host="0.0.0.0",
                path="/profiles/mcp",
                port=self.config.streamable_http_port,
            ),
            self.server.run_http_async(
                transport="sse",
                host="0.0.0.0",
                path="/profiles/sse",
                port=self.config.sse_port,
            ),
        ]
        await asyncio.gather(*tasks)

    async def run(self) -> None:
        signal.signal(signal.SIGINT, lambda sig, frame: self.signal_handler(sig, frame))
        signal.signal(signal.SIGTERM, lambda sig, frame: self.signal_handler(sig, frame))

        self._register_tools()
        self._register_health_endpoints()

        try:
            logger.info("Starting profile hierarchy server...")
            await self._run_server()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt (CTRL+C)")
        except Exception as exc:
            logger.error("Server error: %s", exc)
            raise
        finally:
            logger.info("Server has shut down.")


def main() -> None:
    config = ServerConfig()
    logging.basicConfig(level=config.log_level)
    server = ProfileHierarchyServer(config)
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
