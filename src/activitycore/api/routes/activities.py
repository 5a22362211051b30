"""Activity upload and query routes."""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel
from sqlmodel import Session, select

from activitycore.db.engine import get_session
from activitycore.ingest.upload_service import ActivityUploadService
from activitycore.models.activity import Activity, GpsPoint
from activitycore.models.track import SportType

router = APIRouter()


class UploadResponse(BaseModel):
    activity_id: int
    gps_points_saved: int


@router.post("/upload", response_model=UploadResponse, status_code=201)
def upload_activity(
    file: UploadFile = File(...),
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    sport_type: Optional[SportType] = Form(None),
    user_id: Optional[int] = Form(None),
    session: Session = Depends(get_session),
):
    """Upload a .fit or .gpx file. Unreadable files give 422 with one message."""
    content = file.file.read()
    service = ActivityUploadService(session.get_bind())
    result = service.upload(
        file.filename or "",
        content,
        name=name,
        description=description,
        sport_type=sport_type,
        user_id=user_id,
    )
    if not result.success:
        raise HTTPException(status_code=422, detail=result.error)
    return UploadResponse(activity_id=result.activity_id, gps_points_saved=result.gps_points_saved)


@router.get("/", response_model=List[Activity])
def list_activities(
    user_id: Optional[int] = None,
    limit: int = 20,
    offset: int = 0,
    session: Session = Depends(get_session),
):
    """List recent activities, newest first."""
    query = select(Activity)
    if user_id is not None:
        query = query.where(Activity.user_id == user_id)
    activities = session.exec(
        query.order_by(Activity.started_at.desc()).offset(offset).limit(limit)
    ).all()
    return activities


@router.get("/{activity_id}", response_model=Activity)
def get_activity(activity_id: int, session: Session = Depends(get_session)):
    """Fetch a single activity by primary key."""
    activity = session.get(Activity, activity_id)
    if not activity:
        raise HTTPException(status_code=404, detail="Activity not found")
    return activity


@router.get("/{activity_id}/gps", response_model=List[GpsPoint])
def get_activity_gps(activity_id: int, session: Session = Depends(get_session)):
    """GPS samples of an activity in recording order."""
    if not session.get(Activity, activity_id):
        raise HTTPException(status_code=404, detail="Activity not found")
    return session.exec(
        select(GpsPoint)
        .where(GpsPoint.activity_id == activity_id)
        .order_by(GpsPoint.sequence)
    ).all()
