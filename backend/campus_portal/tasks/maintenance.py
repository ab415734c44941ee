from campus_portal.core.celery_app import celery_app
from campus_portal.core.config import settings
from campus_portal.core.database import SessionLocal
from campus_portal.models import Application, Candidate, CheatingRecord, Complaint
from campus_portal.services.election_service import ElectionService
from campus_portal.utils.file_paths import get_uploads_root, get_upload_paths
import time
import os
import logging

logger = logging.getLogger(__name__)


@celery_app.task(name="close_finished_elections")
def close_finished_elections():
    """Report finished elections and publish their results when auto-publishing is enabled"""
    db = SessionLocal()
    try:
        service = ElectionService(db)
        finished = service.finished_unpublished()
        published = []
        for election in finished:
            logger.info(f"Election {election.id} '{election.title}' has finished")
            if settings.auto_publish_results:
                service.publish_results(election.id)
                published.append(election.id)
        return {'finished': [e.id for e in finished], 'published': published}
    except Exception as exc:
        logger.error(f"Error in close_finished_elections: {exc}")
        db.rollback()
        raise
    finally:
        db.close()


def referenced_upload_paths(db) -> set:
    paths = set()
    for column in (Application.proof, Complaint.attachment, CheatingRecord.proof, Candidate.photo):
        paths.update(value for (value,) in db.query(column).filter(column.isnot(None)).all())
    return {os.path.normpath(p) for p in paths}


@celery_app.task(name="cleanup_orphan_uploads")
def cleanup_orphan_uploads():
    """Remove uploaded files that no record points to once they are past the grace period"""
    uploads_root = get_uploads_root()
    if not os.path.isdir(uploads_root):
        return {'removed': 0}

    base_dir, _ = get_upload_paths()
    cutoff = time.time() - settings.orphan_upload_grace_hours * 3600

    db = SessionLocal()
    try:
        referenced = referenced_upload_paths(db)
    finally:
        db.close()

    removed = 0
    for dirpath, _, filenames in os.walk(uploads_root):
        for filename in filenames:
            full_path = os.path.join(dirpath, filename)
            relative = os.path.normpath(os.path.relpath(full_path, base_dir))
            if relative in referenced:
                continue
            try:
                if os.path.getmtime(full_path) < cutoff:
                    os.remove(full_path)
                    removed += 1
            except OSError as e:
                logger.error(f"Failed to remove orphan upload {full_path}: {e}")

    logger.info(f"Removed {removed} orphan uploads")
    return {'removed': removed}
