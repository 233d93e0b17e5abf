#!/usr/bin/env python3
"""
MCP Server entry point for the ATS application workflow engine.

This server exposes the application status workflow as MCP tools: manual
status updates gated by the status policy, the two bot schedulers (Bot
Automation and Bot Mimic) and the records they act on.

The server uses the FastMCP framework to expose the tools to LLM agents via
the Model Context Protocol.

Usage:
    python server.py

The server runs in stdio mode by default, which is the standard transport
for MCP servers that are invoked by LLM agents.
"""

import logging

from mcp.server.fastmcp import FastMCP

from config import get_config
from db.application_store import initialize_database
from tools.application_records import (
    add_application_note,
    create_job,
    get_application_progress,
    submit_application,
)
from tools.process_bot_applications import process_bot_applications
from tools.update_application_status import update_application_status
from tools.workflow_control import (
    control_scheduler,
    get_workflow_stats,
    trigger_manual_workflow,
)
from utils.workflow_runtime import WorkflowRuntime

config = get_config()

SERVER_INSTRUCTIONS = (
    "This server provides tools for the ATS application status workflow. "
    "\n\n"
    "AUTHORITY MODEL:\n"
    "Technical jobs are processed by the bot; non-technical jobs are processed manually by an admin. "
    "An admin may only accept or reject a technical application once the bot has shortlisted it. "
    "Accepted and rejected are terminal: no actor can move an application out of them."
    "\n\n"
    "TOOLS:\n"
    "Use update_application_status to move one application to a new status as admin or bot. "
    "Use process_bot_applications to advance a batch of technical applications as the bot. "
    "Use trigger_manual_workflow to run one Bot Mimic (or Bot Automation) pass immediately. "
    "Use control_scheduler to start or stop a bot scheduler, and get_workflow_stats to inspect progress. "
    "Use submit_application, create_job, add_application_note and get_application_progress "
    "for the records the workflow acts on."
)


def create_server(runtime: WorkflowRuntime, name: str | None = None) -> FastMCP:
    """
    Build a FastMCP server whose tools act on ``runtime``.

    Args:
        runtime: Composition root owning store, services and schedulers
        name: Server name (defaults to the configured server name)

    Returns:
        FastMCP instance with every workflow tool registered
    """
    mcp = FastMCP(name=name or config.server_name, instructions=SERVER_INSTRUCTIONS)

    @mcp.tool(
        name="update_application_status",
        description=(
            "Move one application to a new status on behalf of an admin or bot. "
            "Checks the role/category authority table, the admin shortlist gate and terminal statuses. "
            "Returns action 'updated', 'noop' or 'blocked' with the denial reason."
        ),
    )
    def update_application_status_tool(
        application_id: int,
        actor_role: str,
        status: str,
        comment: str | None = None,
        actor_id: str | None = None,
    ) -> dict:
        """
        Update an application's status through the status policy.

        Args:
            application_id: Application to update.
            actor_role: 'admin' or 'bot'.
            status: Requested status (pending, reviewing, shortlisted, accepted, rejected,
                applied, reviewed, interview, offer).
            comment: Optional comment recorded in the note and audit event.
            actor_id: Optional actor identity.

        Returns:
            Dictionary with application_id, previous_status, target_status, action,
            success, optional error and the updated application.
        """
        args = {"application_id": application_id, "actor_role": actor_role, "status": status}
        if comment is not None:
            args["comment"] = comment
        if actor_id is not None:
            args["actor_id"] = actor_id

        return update_application_status(args, runtime)

    @mcp.tool(
        name="process_bot_applications",
        description=(
            "Advance up to 100 technical applications one step along "
            "pending -> reviewing -> shortlisted -> accepted as the bot. "
            "Per-item failures are reported without aborting the batch."
        ),
    )
    def process_bot_applications_tool(
        application_ids: list[int], actor_id: str | None = None
    ) -> dict:
        """
        Process a batch of technical applications as the bot.

        Args:
            application_ids: Unique application ids (1-100).
            actor_id: Optional bot identity.

        Returns:
            Dictionary with processed count, per-item errors and processed applications.
        """
        args = {"application_ids": application_ids}
        if actor_id is not None:
            args["actor_id"] = actor_id

        return process_bot_applications(args, runtime)

    @mcp.tool(
        name="trigger_manual_workflow",
        description=(
            "Run one processing pass synchronously. kind='mimic' (default) runs the staged "
            "Bot Mimic workflow; kind='automation' runs the flat random Bot Automation."
        ),
    )
    def trigger_manual_workflow_tool(kind: str | None = None) -> dict:
        """
        Run one bot processing pass now.

        Args:
            kind: 'mimic' (default) or 'automation'.

        Returns:
            Dictionary with message, kind, processed_count and the pass summary.
        """
        args = {}
        if kind is not None:
            args["kind"] = kind

        return trigger_manual_workflow(args, runtime)

    @mcp.tool(
        name="get_workflow_stats",
        description=(
            "Report the number of technical applications, their distribution over workflow "
            "stages and the state of both bot schedulers."
        ),
    )
    def get_workflow_stats_tool() -> dict:
        """
        Inspect workflow progress.

        Returns:
            Dictionary with total_technical_applications, stage_distribution,
            is_running and per-scheduler state.
        """
        return get_workflow_stats({}, runtime)

    @mcp.tool(
        name="control_scheduler",
        description="Start or stop the 'automation' or 'mimic' scheduler. Idempotent.",
    )
    def control_scheduler_tool(kind: str, action: str) -> dict:
        """
        Start or stop one bot scheduler.

        Args:
            kind: 'automation' or 'mimic'.
            action: 'start' or 'stop'.

        Returns:
            Dictionary with kind, action, changed and is_running.
        """
        return control_scheduler({"kind": kind, "action": action}, runtime)

    @mcp.tool(
        name="submit_application",
        description="Submit a pending application for an active job. One application per applicant and job.",
    )
    def submit_application_tool(
        job_id: int, applicant_id: str, cover_letter: str | None = None
    ) -> dict:
        """
        Submit an application.

        Args:
            job_id: Job to apply for.
            applicant_id: Applicant identity.
            cover_letter: Optional cover letter.

        Returns:
            Dictionary with message and the created application.
        """
        args = {"job_id": job_id, "applicant_id": applicant_id}
        if cover_letter is not None:
            args["cover_letter"] = cover_letter

        return submit_application(args, runtime)

    @mcp.tool(
        name="create_job",
        description=(
            "Create an active job posting. role_category is 'technical' (bot-processed) "
            "or 'non-technical' (admin-processed, default)."
        ),
    )
    def create_job_tool(
        title: str,
        department: str | None = None,
        role_category: str | None = None,
        actor_id: str | None = None,
    ) -> dict:
        """
        Create a job posting.

        Args:
            title: Job title.
            department: Optional department.
            role_category: 'technical' or 'non-technical' (default).
            actor_id: Optional admin identity.

        Returns:
            Dictionary with message and the created job.
        """
        args = {"title": title}
        if department is not None:
            args["department"] = department
        if role_category is not None:
            args["role_category"] = role_category
        if actor_id is not None:
            args["actor_id"] = actor_id

        return create_job(args, runtime)

    @mcp.tool(
        name="add_application_note",
        description="Append an admin note (at least 3 characters) to an application without changing its status.",
    )
    def add_application_note_tool(
        application_id: int, note: str, actor_id: str | None = None
    ) -> dict:
        """
        Add an admin note.

        Args:
            application_id: Application to annotate.
            note: Note text.
            actor_id: Optional admin identity.

        Returns:
            Dictionary with message and the updated application.
        """
        args = {"application_id": application_id, "note": note, "actor_role": "admin"}
        if actor_id is not None:
            args["actor_id"] = actor_id

        return add_application_note(args, runtime)

    @mcp.tool(
        name="get_application_progress",
        description="Return an application with its progress timeline (submission plus every note), newest first.",
    )
    def get_application_progress_tool(application_id: int) -> dict:
        """
        Get an application's progress timeline.

        Args:
            application_id: Application to inspect.

        Returns:
            Dictionary with application, progress_timeline and total_events.
        """
        return get_application_progress({"application_id": application_id}, runtime)

    return mcp


def main():
    """
    Main entry point for the MCP server.

    Creates the database if needed, starts the bot schedulers (unless
    ATS_AUTOSTART_SCHEDULERS is false) and runs the server in stdio mode.
    Schedulers are stopped when the server exits.
    """
    config.setup_logging()

    logger = logging.getLogger(__name__)
    logger.info("Starting ATS Workflow MCP Server")
    logger.info(f"Server name: {config.server_name}")

    warnings = config.validate()
    for warning in warnings:
        logger.warning(warning)

    initialize_database(config.get_db_path_str())

    runtime = WorkflowRuntime.from_config(config)
    mcp = create_server(runtime)

    if config.autostart_schedulers:
        runtime.start_all()

    try:
        logger.info("Server starting in stdio mode")
        mcp.run(transport="stdio")
    finally:
        runtime.stop_all()
        logger.info("Schedulers stopped")


if __name__ == "__main__":
    main()
