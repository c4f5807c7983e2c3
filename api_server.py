#!/usr/bin/env python3
"""
LoRA Dataset Curator API Server
Project browsing, dataset reports and exports over HTTP.
"""

import os
import logging
from datetime import datetime
from io import BytesIO
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from flask import Flask, request, jsonify, send_file
from flask_cors import CORS
from werkzeug.utils import secure_filename

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

from models.project import Project
from repositories.archive_repository import ZipArchiveWriter
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

app = Flask(__name__)
CORS(app)  # Enable CORS for frontend communication

# Configuration
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "5000"))

# Initialize services
project_service = ProjectService()
balance_service = BalanceService()
coverage_service = CoverageService()
dataset_check_service = DatasetCheckService()

logger = logging.getLogger(__name__)

ZIP_EXPORTS = {
    'static-html': export_static_gallery,
    'zip': export_project_zip,
    'shot-types': export_shot_type_zip,
}
EXPORT_KINDS = sorted(list(ZIP_EXPORTS) + ['backup', 'captions-csv', 'ai-toolkit'])


def error_response(message: str, status: int):
    return jsonify({'success': False, 'message': message}), status


def handle_error(action: str, e: Exception):
    """Map an exception raised while serving a request to a JSON error response."""
    if isinstance(e, FileNotFoundError):
        logger.warning(f"{action}: {e}")
        return error_response(str(e), 404)
    if isinstance(e, ValueError):
        logger.warning(f"{action}: {e}")
        return error_response(str(e), 400)
    logger.error(f"{action} error: {e}")
    return error_response(f'Error in {action.lower()}: {str(e)}', 500)


def zip_download(data: bytes, project_name: str, kind: str):
    filename = secure_filename(ZipArchiveWriter.archive_name(project_name, kind)) or f"{kind}.zip"
    return send_file(
        BytesIO(data),
        mimetype='application/zip',
        as_attachment=True,
        download_name=filename,
    )


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'data_root': str(project_service.repository.root),
        'projects': len(project_service.list_projects()),
    })


@app.route('/api/projects', methods=['GET'])
def list_projects():
    try:
        return jsonify({'success': True, 'projects': project_service.list_projects()})
    except Exception as e:
        return handle_error('Project listing', e)


@app.route('/api/projects/<name>', methods=['GET'])
def get_project(name):
    try:
        project = project_service.load(name)
        return jsonify({'success': True, 'project': project.to_dict()})
    except Exception as e:
        return handle_error('Project loading', e)


@app.route('/api/projects/<name>', methods=['PUT'])
def save_project(name):
    """Replace a project's state with the posted project JSON."""
    try:
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return error_response('Request body must be a project JSON object', 400)

        project = Project.from_dict(payload.get('project', payload))
        project.project_name = name
        path = project_service.save(project)
        logger.info(f"Project '{name}' saved via API")
        return jsonify({'success': True, 'path': str(path)})
    except Exception as e:
        return handle_error('Project saving', e)


@app.route('/api/projects/<name>/balance', methods=['GET'])
def project_balance(name):
    try:
        project = project_service.load(name)
        report = balance_service.score(project_service.iter_images(project))
        return jsonify({'success': True, 'report': report.to_dict()})
    except Exception as e:
        return handle_error('Balance scoring', e)


@app.route('/api/projects/<name>/coverage', methods=['GET'])
def project_coverage(name):
    try:
        project = project_service.load(name)
        report = coverage_service.score(project_service.iter_images(project))
        return jsonify({'success': True, 'report': report.to_dict()})
    except Exception as e:
        return handle_error('Coverage scoring', e)


@app.route('/api/projects/<name>/dataset-check', methods=['GET'])
def project_dataset_check(name):
    try:
        project = project_service.load(name)
        summary = dataset_check_service.summarize(project)
        return jsonify({'success': True, 'summary': summary.to_dict()})
    except Exception as e:
        return handle_error('Dataset check', e)


@app.route('/api/projects/<name>/export/<kind>', methods=['POST'])
def export_project(name, kind):
    """Run one exporter and hand its result back."""
    try:
        if kind not in EXPORT_KINDS:
            return error_response(f"Unknown export kind '{kind}'. Expected one of: {', '.join(EXPORT_KINDS)}", 400)

        project = project_service.load(name)
        logger.info(f"Running '{kind}' export for project '{name}'")

        if kind in ZIP_EXPORTS:
            data = ZIP_EXPORTS[kind](project)
            return zip_download(data, project.project_name, kind)

        if kind == 'backup':
            path = export_backup_zip(project, project_service.repository)
            return send_file(str(path), mimetype='application/zip', as_attachment=True, download_name=path.name)

        if kind == 'captions-csv':
            csv_text = export_captions_csv(project)
            stamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            filename = secure_filename(f"{project.project_name}_captions_{stamp}.csv") or "captions.csv"
            return send_file(
                BytesIO(csv_text.encode('utf-8')),
                mimetype='text/csv',
                as_attachment=True,
                download_name=filename,
            )

        # ai-toolkit
        folder = export_to_ai_toolkit(project)
        return jsonify({
            'success': True,
            'path': str(folder),
            'message': f'Dataset exported to {folder}'
        })

    except Exception as e:
        return handle_error('Export', e)


def main():
    logger.info("Starting LoRA Dataset Curator API Server...")
    logger.info(f"Data root: {project_service.repository.root}")
    app.run(host=API_HOST, port=API_PORT, debug=False)


if __name__ == '__main__':
    main()
