"""MCP server exposing the calendar tools over stdio."""
import logging

from fastmcp import FastMCP
from fastmcp.tools import FunctionTool, Tool
from fastmcp.tools.tool_transform import ArgTransform
from pydantic.alias_generators import to_camel

from eventdesk.calendar.documents import IcsDirectory
from eventdesk.calendar.store import EventStore
from eventdesk.core.config import settings
from eventdesk.core.logging_setup import configure_logging
from eventdesk.mcp.tools import CalendarTools

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Event Desk manages local calendar events. Every created, updated or deleted "
    "event gets an .ics file that can be imported into any calendar application."
)

TOOL_DESCRIPTIONS = {
    "create_event": (
        "Create a new calendar event. Generates an ICS file that can be imported "
        "into any calendar application."
    ),
    "list_events": "List all tracked calendar events",
    "get_event": "Get details of a specific event by ID",
    "update_event": (
        "Update an existing event. Generates a new ICS file with updated information."
    ),
    "delete_event": "Delete an event. Generates a cancellation ICS file.",
}


def camel_case_tool(fn, name: str, description: str) -> Tool:
    """Build a tool whose arguments are exposed as camelCase (startDate, allDay)."""
    tool = FunctionTool.from_function(fn, name=name, description=description)
    renames = {
        param: ArgTransform(name=to_camel(param))
        for param in tool.parameters.get("properties", {})
        if to_camel(param) != param
    }
    if not renames:
        return tool
    return Tool.from_tool(tool, transform_args=renames)


def build_server(tools: CalendarTools) -> FastMCP:
    """Register every calendar tool on a new FastMCP server."""
    server = FastMCP(name="eventdesk", instructions=INSTRUCTIONS)
    for name, description in TOOL_DESCRIPTIONS.items():
        logger.debug("Registering MCP tool: %s", name)
        server.add_tool(camel_case_tool(getattr(tools, name), name, description))
    return server


def main() -> None:
    """Open the store and serve the tools on stdio."""
    configure_logging(debug=settings.debug, log_dir=settings.log_dir)
    logger.info("Event Desk MCP server starting")
    store = EventStore.open(
        settings.resolved_database_url,
        # SQL echo writes to stdout, which carries the protocol
        echo=False,
        uid_domain=settings.uid_domain,
    )
    documents = IcsDirectory.from_settings(settings)
    logger.info("Database: %s, ICS files: %s", store.engine.url, documents.directory)

    server = build_server(CalendarTools(store, documents))
    server.run()


if __name__ == "__main__":
    main()
