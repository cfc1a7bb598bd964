"""Project management commands."""

import click
from importtracker.cli.error_handling import handle_domain_error
from importtracker.cli.project_resolution import open_session_or_exit
from importtracker.domain.errors import DomainError
from importtracker.utils.project_resolver import resolve_project


@click.group()
def project_group():
    """Manage projects."""
    pass


@project_group.command("list")
@click.pass_context
def list_projects(ctx):
    """List all projects."""
    session = open_session_or_exit(ctx, None)

    click.echo("\nProjects:")
    click.echo("-" * 60)
    for item in session.projects:
        click.echo(f"{item.id:18s} | {item.name:25s} | {len(item.entries)} entries")


@project_group.command("create")
@click.argument("name", required=False, default="")
@click.pass_context
def create_project(ctx, name: str):
    """Create a new project.

    The new project copies the config of the first project.

    Examples:
        importtracker project create "March batch"
    """
    session = open_session_or_exit(ctx, None)
    try:
        created = session.create_project(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created project '{created.name}' (ID: {created.id})")


@project_group.command("rename")
@click.argument("project", metavar="PROJECT")
@click.argument("new_name", metavar="NEW_NAME")
@click.pass_context
def rename_project(ctx, project: str, new_name: str):
    """Rename a project.

    PROJECT can be a project name or ID.
    """
    session = open_session_or_exit(ctx, project)
    try:
        session.editor.rename(new_name)
        session.save()
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Renamed project to '{session.project.name}'")


@project_group.command("remove")
@click.argument("project", metavar="PROJECT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def remove_project(ctx, project: str, yes: bool):
    """Remove a project and all of its entries."""
    session = open_session_or_exit(ctx, None)

    def confirm(target) -> bool:
        if yes:
            return True
        return click.confirm(
            f"Remove project '{target.name}' with {len(target.entries)} entries?", default=False
        )

    try:
        project_id = resolve_project(session.projects, project)
        removed = session.remove_project(project_id, confirm)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if removed:
        click.echo(f"Removed project {project_id}")
    else:
        click.echo("Cancelled.")


@project_group.command("notes")
@click.argument("project", metavar="PROJECT")
@click.argument("notes", required=False)
@click.pass_context
def project_notes(ctx, project: str, notes: str | None):
    """Show or replace a project's notes."""
    session = open_session_or_exit(ctx, project)
    if notes is None:
        click.echo(session.project.notes or "(no notes)")
        return
    try:
        session.editor.set_notes(notes)
        session.save()
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo("Notes saved.")


def register_commands(cli):
    """Register project commands with main CLI."""
    cli.add_command(project_group, name="project")
