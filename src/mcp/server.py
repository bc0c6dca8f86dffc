"""Goal Forecast MCP Server.

Exposes savings-goal forecasting as MCP tools for use with Claude Desktop
and Claude Code: upload a transaction export, describe a goal, and get a
forecast with practical suggestions.
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from datetime import date
from pathlib import Path
from dotenv import load_dotenv
from mcp.server.fastmcp import Context, FastMCP

# Ensure project root is on sys.path so `src` is importable when loaded
# directly by tools like `mcp dev` (which use importlib, not `python -m`).
_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

load_dotenv()

from src.core.config import ForecastSettings
from src.core.csv_loader import load_transactions_csv
from src.core.forecast_service import analyze_goal
from src.core.goal_parser import parse_goal_text
from src.core.suggestion_client import SuggestionClient
from src.mcp.error_handling import handle_tool_errors
from src.mcp.formatters import format_forecast_result, format_parsed_goal
from src.models.schemas import AnalyzeGoalInput, ParseGoalInput

logger = logging.getLogger("goal_forecast")


# --- Lifespan: initialize shared resources ---


@asynccontextmanager
async def app_lifespan(server: FastMCP):
    settings = ForecastSettings.from_env()
    client = SuggestionClient.from_settings(settings)
    if not client.enabled:
        logger.info("SUGGESTION_API_URL not set; external suggestions disabled")

    yield {"settings": settings, "suggestions": client}

    client.close()


mcp = FastMCP("goal_forecast_mcp", lifespan=app_lifespan)


# --- Helper to get shared state from context ---


def _get_deps(ctx) -> tuple[ForecastSettings, SuggestionClient]:
    state = ctx.request_context.lifespan_context
    return state["settings"], state["suggestions"]


# --- Tools ---


@mcp.tool(
    name="forecast_analyze_goal",
    annotations={
        "title": "Forecast a Savings Goal",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
@handle_tool_errors
async def forecast_analyze_goal(params: AnalyzeGoalInput, ctx: Context) -> str:
    """Forecast whether a savings goal is reachable from a CSV of transactions.

    Give either a plain-English goal (e.g. "Save $5,000 by June 2026") or a
    target amount and number of months.
    """
    settings, client = _get_deps(ctx)
    today = date.today()
    transactions = load_transactions_csv(params.csv_path, reference_date=today)

    # The suggestion service call blocks; keep it off the event loop.
    result = await asyncio.to_thread(
        analyze_goal,
        transactions,
        params.to_goal_request(),
        settings,
        client,
        today,
    )
    return format_forecast_result(result)


@mcp.tool(
    name="forecast_parse_goal",
    annotations={
        "title": "Preview Goal Parsing",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def forecast_parse_goal(params: ParseGoalInput) -> str:
    """Show the amount and deadline understood from a plain-English goal."""
    parsed = parse_goal_text(params.goal_text)
    return format_parsed_goal(params.goal_text, parsed)


# --- Entry point ---

if __name__ == "__main__":
    mcp.run()
