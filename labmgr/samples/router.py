# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Sample endpoints – intake, listing and edits of field samples.

Access rule enforced by every item handler
------------------------------------------
``_load_sample`` loads the row and asserts the caller owns it, unless the
caller is an admin.  Admins also see every sample in the list endpoint;
everyone else sees only their own.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from labmgr.database import get_db
from labmgr.core.logger import logger
from labmgr.core.schemas import parse_id
from labmgr.core.security import ensure_owner_or_admin, get_current_user, is_admin
from labmgr.models.notification import Notification
from labmgr.models.sample import Sample
from labmgr.models.sensor_data import SensorData
from labmgr.models.user import User
from labmgr.samples.schemas import SampleCreate, SampleResponse, SampleUpdate

router = APIRouter(prefix="/api/samples", tags=["samples"])


def _load_sample(raw_id: str, user: User, db: Session) -> Sample:
    """
    Load a Sample by ID and verify *user* may touch it.

    Raises 400 for a malformed ID, 404 if the sample does not exist and 403
    if it belongs to someone else.
    """
    sample_pk = parse_id(raw_id, "sample")
    sample = db.query(Sample).filter(Sample.id == sample_pk).first()
    if not sample:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sample not found")
    ensure_owner_or_admin(user, sample.user_id)
    return sample


# ---------------------------------------------------------------------------
# GET /api/samples
# ---------------------------------------------------------------------------


@router.get("", response_model=list[SampleResponse])
def list_samples(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    q = db.query(Sample)
    if not is_admin(current_user):
        q = q.filter(Sample.user_id == current_user.id)
    return q.order_by(Sample.created_at.desc(), Sample.id.desc()).all()


# ---------------------------------------------------------------------------
# POST /api/samples
# ---------------------------------------------------------------------------


@router.post("", response_model=SampleResponse, status_code=status.HTTP_201_CREATED)
def create_sample(
    body: SampleCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Register a sample owned by the caller and notify them."""
    if db.query(Sample).filter(Sample.sample_id == body.sample_id).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Sample ID already exists")

    sample = Sample(user_id=current_user.id, **body.model_dump(mode="python"))
    db.add(sample)
    db.flush()  # get sample.id before commit
    db.add(Notification(
        user_id=current_user.id,
        title="Sample Submitted",
        message=f"Sample {sample.sample_id} has been submitted successfully",
        type="sample_entry",
    ))
    db.commit()
    db.refresh(sample)

    logger.info("Sample %s (%s) created by user id=%d", sample.sample_id, sample.sample_type, current_user.id)
    return sample


# ---------------------------------------------------------------------------
# GET /api/samples/{id}
# ---------------------------------------------------------------------------


@router.get("/{sample_id}", response_model=SampleResponse)
def get_sample(
    sample_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _load_sample(sample_id, current_user, db)


# ---------------------------------------------------------------------------
# PUT /api/samples/{id}
# ---------------------------------------------------------------------------


@router.put("/{sample_id}", response_model=SampleResponse)
def update_sample(
    sample_id: str,
    body: SampleUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Partial update; only fields present in the body are written."""
    sample = _load_sample(sample_id, current_user, db)
    for key, value in body.model_dump(exclude_unset=True, mode="python").items():
        setattr(sample, key, value)
    db.commit()
    db.refresh(sample)
    return sample


# ---------------------------------------------------------------------------
# DELETE /api/samples/{id}
# ---------------------------------------------------------------------------


@router.delete("/{sample_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sample(
    sample_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Remove a sample together with its sensor readings."""
    sample = _load_sample(sample_id, current_user, db)
    sample_pk = sample.id
    db.query(SensorData).filter(SensorData.sample_id == sample_pk).delete()
    db.delete(sample)
    db.commit()
    logger.info("Sample id=%d deleted by user id=%d", sample_pk, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
