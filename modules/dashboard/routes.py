# modules/dashboard/routes.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.connection import get_db
from modules.dashboard import schemas, services
from modules.security.deps import Identity, get_current_user

api_router = APIRouter()


@api_router.get("/summary", response_model=schemas.DashboardSummaryOut)
def read_dashboard_summary_route(me: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    return services.build_summary(db, me)
