#!/usr/bin/env python3
"""
LoRA Dataset Curator command line.

    lora-dataset list
    lora-dataset report <project>
    lora-dataset export <project> <kind> [-o OUT]
"""

import argparse
import logging
import sys
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

from models.balance_report import BalanceReport
from models.coverage_report import CoverageReport
from repositories.archive_repository import ZipArchiveWriter
from repositories.project_repository import ProjectRepository
from services.balance_service import BalanceService
from services.coverage_service import CoverageService
from services.dataset_check_service import DatasetCheckService
from services.project_service import ProjectService
from pipeline.static_gallery_exporter import export_static_gallery
from pipeline.project_zip_exporter import export_project_zip
from pipeline.shot_type_exporter import export_shot_type_zip
from pipeline.captions_csv_exporter import export_captions_csv
from pipeline.ai_toolkit_exporter import export_to_ai_toolkit
from pipeline.backup_exporter import export_backup_zip

logger = logging.getLogger(__name__)

ZIP_EXPORTS = {
    "static-html": export_static_gallery,
    "zip": export_project_zip,
    "shot-types": export_shot_type_zip,
}
EXPORT_KINDS = list(ZIP_EXPORTS) + ["captions-csv", "ai-toolkit", "backup"]


def format_balance(report: BalanceReport) -> str:
    lines = [f"Shot-type balance ({report.total_detected} detected images)"]
    for row in report.rows:
        status = "ok" if row.in_range else f"{row.needed_diff:+d}"
        lines.append(
            f"  {row.bucket:<7} {row.count:>4}  {row.actual_pct:5.1f}% "
            f"(target {row.target_low:g}-{row.target_high:g}%)  "
            f"{'★' * row.stars:<5}  {status}"
        )
    lines.append(f"  Overall: {report.overall_stars:.2f} stars, grade {report.overall_grade}")
    return "\n".join(lines)


def format_coverage(report: CoverageReport) -> str:
    lines = [f"Orthogonal coverage: {report.overall_orthogonal_pct}%"]
    for dimension, pct in report.coverage_pct.items():
        lines.append(f"  {dimension:<12} {pct:5.1f}%")
    lines.append("Recommendations:")
    lines.extend(f"  - {rec}" for rec in report.recommendations)
    return "\n".join(lines)


def cmd_list(project_service: ProjectService, args) -> int:
    projects = project_service.list_projects()
    if not projects:
        print(f"No projects under {project_service.repository.root}")
    for name in projects:
        print(name)
    return 0


def cmd_report(project_service: ProjectService, args) -> int:
    project = project_service.load(args.project)
    images = list(project_service.iter_images(project))
    summary = DatasetCheckService().summarize(project)

    print(f"\n📊 {project.project_name}: {summary.image_count} images, "
          f"{summary.captioned_pct}% captioned, {summary.full_metadata_pct}% with full metadata\n")
    print(format_balance(BalanceService().score(images)))
    print()
    print(format_coverage(CoverageService().score(images)))
    return 0


def cmd_export(project_service: ProjectService, args) -> int:
    project = project_service.load(args.project)

    if args.kind in ZIP_EXPORTS:
        data = ZIP_EXPORTS[args.kind](project)
        out = Path(args.output) if args.output else Path(ZipArchiveWriter.archive_name(project.project_name, args.kind))
        path = ZipArchiveWriter.save(data, out)
    elif args.kind == "captions-csv":
        path = Path(args.output or f"{project.project_name}_captions.csv")
        path.write_text(export_captions_csv(project), encoding="utf-8")
    elif args.kind == "ai-toolkit":
        if args.output:
            path = export_to_ai_toolkit(project, datasets_path=args.output)
        else:
            path = export_to_ai_toolkit(project)
    else:
        path = export_backup_zip(project, project_service.repository)

    print(f"✅ Export '{args.kind}' written to {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lora-dataset", description="LoRA dataset curation tools")
    parser.add_argument("--root", help="Data root holding project folders (defaults to LORA_DATA_ROOT)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List projects")

    report = sub.add_parser("report", help="Print balance and coverage reports")
    report.add_argument("project")

    export = sub.add_parser("export", help="Export a project")
    export.add_argument("project")
    export.add_argument("kind", choices=EXPORT_KINDS)
    export.add_argument("-o", "--output", help="Output file (datasets folder for ai-toolkit)")
    return parser


COMMANDS = {
    "list": cmd_list,
    "report": cmd_report,
    "export": cmd_export,
}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.root:
        project_service = ProjectService(ProjectRepository(args.root))
    else:
        project_service = ProjectService()

    try:
        return COMMANDS[args.command](project_service, args)
    except Exception as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
