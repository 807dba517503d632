from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from stockledger.api.deps import get_reference_cache
from stockledger.database import get_db
from stockledger.schemas.product import ReferenceCreate, ReferenceOut
from stockledger.services import reference_service
from stockledger.services.reference_cache import ReferenceCache

router = APIRouter(tags=["Reference data"])


def _add_routes(kind: str):
    @router.post(f"/{kind}", response_model=ReferenceOut, status_code=201, name=f"create_{kind}")
    def create(data: ReferenceCreate, db: Session = Depends(get_db), cache: ReferenceCache = Depends(get_reference_cache)):
        try:
            return reference_service.create_reference(db, cache, kind, data.name)
        except ValueError as e:
            raise HTTPException(400, str(e))

    @router.get(f"/{kind}", response_model=list[ReferenceOut], name=f"list_{kind}")
    def list_all(db: Session = Depends(get_db)):
        return reference_service.list_references(db, kind)


for _kind in ("colors", "brands", "categories"):
    _add_routes(_kind)
