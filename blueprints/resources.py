"""Resource routes: classroom lists, sharing, the visible library and downloads."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import login_required

from db_stores import DownloadStoreDB, ResourceStoreDB
from helpers import acting_user, current_profile, current_user_id, error, json_body
from models import FILE_TYPES, GRADES
from policy import can_view, viewer_grade, viewer_grades

bp = Blueprint("resources", __name__)


@bp.route("/api/resources/<classroom>")
def list_resources(classroom):
    """Every resource shared to one classroom, newest first."""
    return jsonify([r.to_dict() for r in ResourceStoreDB().by_grade(classroom)])


@bp.route("/api/resources", methods=["POST"])
def create_resource():
    data = json_body()
    title = str(data.get("title") or "").strip()
    subject = str(data.get("subject") or "").strip()
    if not title:
        return error("Title is required", 400)
    if not subject:
        return error("Subject is required", 400)

    uploader = acting_user(data.get("uploadedBy"))
    # Students always share to their own grade; other roles pick one.
    if uploader is not None and uploader.role == "student" and uploader.grade:
        grade = viewer_grade(uploader)
    else:
        grade = str(data.get("classroom") or data.get("grade") or "").strip()
    if grade not in GRADES:
        return error("Classroom must be one of grades 6-11", 400)

    file_type = data.get("fileType")
    resource = ResourceStoreDB().create(
        title=title,
        subject=subject,
        grade=grade,
        description=str(data.get("description") or "").strip(),
        file_url=data.get("fileUrl") or data.get("fileUri") or "",
        file_name=data.get("fileName") or "",
        file_type=file_type if file_type in FILE_TYPES else "other",
        topic=str(data.get("topic") or "").strip(),
        uploaded_by=uploader.id if uploader else None,
        uploaded_by_name=uploader.display_name if uploader else str(data.get("uploadedByName") or ""),
    )
    return jsonify(resource.to_dict()), 201


@bp.route("/api/resources")
@login_required
def library():
    """Resources the current user may see; ``?subject=`` filters."""
    viewer = current_profile()
    if viewer is None:
        return error("User not found", 404)
    if viewer.role == "parent":
        return error("Parents do not have a resource library", 403)

    visible = ResourceStoreDB().by_grades(
        viewer_grades(viewer), subject=request.args.get("subject") or None
    )
    grade = request.args.get("grade")
    if grade:
        visible = [r for r in visible if r.grade == grade]
    return jsonify({"resources": [r.to_dict() for r in visible]})


@bp.route("/api/resources/<int:resource_id>/download", methods=["POST"])
@login_required
def download(resource_id):
    viewer = current_profile()
    resource = ResourceStoreDB().get(resource_id)
    if resource is None:
        return error("Resource not found", 404)
    if viewer is None or not can_view(viewer, resource.grade):
        return error("You do not have access to this resource", 403)
    record = DownloadStoreDB(viewer.id).record(resource)
    return jsonify({"download": record.to_dict(), "resource": resource.to_dict()}), 201


@bp.route("/api/downloads")
@login_required
def downloads():
    """Download history, newest first, with each resource's current details."""
    store = ResourceStoreDB()
    items = []
    for record in DownloadStoreDB(current_user_id()).recent():
        resource = store.get(record.resource_id)
        if resource is None:
            continue
        entry = resource.to_dict()
        entry["fileName"] = record.file_name
        entry["downloadedAt"] = record.downloaded_at
        entry["downloadId"] = record.id
        items.append(entry)
    return jsonify({"downloads": items})
