#!/usr/bin/env python3
"""
Internship admin CLI

Provisioning and maintenance commands for operators. Student and staff
accounts come from institutional records; this tool loads them, inspects the
overview, drains the notification outbox and renders undertakings offline.

Usage:
    internship-admin init-db
    internship-admin add-department "Computer Applications" --code MCA
    internship-admin add-staff t1@psgtech.ac.in "Dr. Tutor"
    internship-admin add-student 21mx101@psgtech.ac.in "Student Name" --roll-number 21MX101 --department "Computer Applications"
    internship-admin overview
    internship-admin render-pdf <submission-id> -o undertaking.pdf
    internship-admin issue-token t1@psgtech.ac.in staff
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from internship.core.database import AsyncSessionLocal, init_db, close_db
from internship.core.exceptions import DepartmentNotFoundError, InternshipError
from internship.core.security import PrincipalRole, create_principal_token
from internship.services.directory_store import DirectoryStore
from internship.services.notification_service import dispatch_pending_notifications
from internship.services.submission_service import SubmissionLifecycleService
from internship.services.undertaking_pdf import render_undertaking

console = Console()


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog="internship-admin",
        description="Administration commands for the internship undertaking service",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("init-db", help="Create database tables")

    dept_parser = subparsers.add_parser("add-department", help="Add a department")
    dept_parser.add_argument("name")
    dept_parser.add_argument("--code", default=None, help="Short code, e.g. MCA")

    staff_parser = subparsers.add_parser("add-staff", help="Add a staff member (tutor)")
    staff_parser.add_argument("email")
    staff_parser.add_argument("name")

    student_parser = subparsers.add_parser("add-student", help="Add a student")
    student_parser.add_argument("email")
    student_parser.add_argument("name")
    student_parser.add_argument("--roll-number", default=None)
    student_parser.add_argument("--year", type=int, default=None)
    student_parser.add_argument("--department", default=None, help="Department name")

    subparsers.add_parser("list-departments", help="List departments")
    subparsers.add_parser("overview", help="Accepted submissions by department and class")
    subparsers.add_parser("dispatch-notifications", help="Deliver pending outbox notifications")

    pdf_parser = subparsers.add_parser("render-pdf", help="Render a submission's undertaking")
    pdf_parser.add_argument("submission_id")
    pdf_parser.add_argument("-o", "--output", default=None, help="Output file")

    token_parser = subparsers.add_parser("issue-token", help="Mint a development access token")
    token_parser.add_argument("email")
    token_parser.add_argument("role", choices=[r.value for r in PrincipalRole])
    token_parser.add_argument("--subject-id", default="", help="Subject id (sub claim)")

    return parser


async def cmd_init_db(args) -> int:
    await init_db()
    console.print("[green]✓[/green] Database tables created")
    return 0


async def cmd_add_department(args) -> int:
    async with AsyncSessionLocal() as session:
        directory = DirectoryStore(session)
        if await directory.get_department_by_name(args.name):
            console.print(f"[yellow]Department '{args.name}' already exists[/yellow]")
            return 1
        department = await directory.add_department(args.name, args.code)
        await session.commit()
    console.print(f"[green]✓[/green] Department {department.name} ({department.id})")
    return 0


async def cmd_add_staff(args) -> int:
    async with AsyncSessionLocal() as session:
        directory = DirectoryStore(session)
        if await directory.get_staff_by_email(args.email):
            console.print(f"[yellow]Staff {args.email} already exists[/yellow]")
            return 1
        staff = await directory.add_staff(args.email, args.name)
        await session.commit()
    console.print(f"[green]✓[/green] Staff {staff.email} ({staff.id})")
    return 0


async def cmd_add_student(args) -> int:
    async with AsyncSessionLocal() as session:
        directory = DirectoryStore(session)
        if await directory.get_student_by_email(args.email):
            console.print(f"[yellow]Student {args.email} already exists[/yellow]")
            return 1

        department = None
        if args.department:
            department = await directory.get_department_by_name(args.department)
            if not department:
                raise DepartmentNotFoundError(args.department)

        student = await directory.add_student(
            args.email, args.name,
            roll_number=args.roll_number, year=args.year, department=department,
        )
        await session.commit()
    console.print(f"[green]✓[/green] Student {student.email} ({student.id})")
    return 0


async def cmd_list_departments(args) -> int:
    async with AsyncSessionLocal() as session:
        departments = await DirectoryStore(session).list_departments()

    table = Table(title="Departments")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Code")
    for department in departments:
        table.add_row(department.id, department.name, department.code or "")
    console.print(table)
    return 0


async def cmd_overview(args) -> int:
    async with AsyncSessionLocal() as session:
        report = await SubmissionLifecycleService(session).admin_overview()

    if not report.overview:
        console.print("[dim]No accepted submissions yet[/dim]")
        return 0

    tree = Tree("[bold]Accepted internships[/bold]")
    for department, classes in sorted(report.overview.items()):
        dept_node = tree.add(f"[cyan]{department}[/cyan]")
        for class_name, entries in sorted(classes.items()):
            class_node = dept_node.add(f"{class_name} ({len(entries)})")
            for entry in entries:
                class_node.add(f"{entry.student_name} → {entry.company_name}")
    console.print(tree)
    return 0


async def cmd_dispatch_notifications(args) -> int:
    counts = await dispatch_pending_notifications()
    console.print(f"Notifications: [green]{counts['sent']} sent[/green], [red]{counts['failed']} failed[/red]")
    return 0


async def cmd_render_pdf(args) -> int:
    async with AsyncSessionLocal() as session:
        data = await SubmissionLifecycleService(session).get_document_context(args.submission_id)

    output = Path(args.output or data.filename)
    output.write_bytes(render_undertaking(data))
    console.print(f"[green]✓[/green] Wrote {output}")
    return 0


async def cmd_issue_token(args) -> int:
    token = create_principal_token(args.email, args.role, args.subject_id or args.email)
    console.print(token, soft_wrap=True)
    return 0


COMMANDS = {
    "init-db": cmd_init_db,
    "add-department": cmd_add_department,
    "add-staff": cmd_add_staff,
    "add-student": cmd_add_student,
    "list-departments": cmd_list_departments,
    "overview": cmd_overview,
    "dispatch-notifications": cmd_dispatch_notifications,
    "render-pdf": cmd_render_pdf,
    "issue-token": cmd_issue_token,
}


async def run(args) -> int:
    try:
        return await COMMANDS[args.command](args)
    except InternshipError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        return 1
    finally:
        await close_db()


def main(argv: Optional[list] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
