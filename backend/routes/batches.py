# backend/routes/batches.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from utils.tokenJWT import get_current_user
from services.batch_report import build_batch_report
from schemas.batch import BatchReportResponse

router = APIRouter(prefix="/batches", tags=["Batches"])

# Profitability report: costs, revenue, profit and per-product/location sales
@router.get("/{batch_id}/report", response_model=BatchReportResponse)
def batch_report(
    batch_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return BatchReportResponse(data=build_batch_report(db, batch_id))
