from fastapi import APIRouter, HTTPException, Request

from schemas.common import CollegeOut, CollegeInput, SuccessResponse
from services.auth import require_admin
from services.colleges import list_colleges, get_college, create_college, deactivate_college
from services.permissions import Capability

router = APIRouter(prefix="/api", tags=["colleges"])


@router.get("/colleges", response_model=list[CollegeOut])
async def get_colleges():
    return list_colleges()


@router.get("/colleges/{code}", response_model=CollegeOut)
async def get_college_by_code(code: str):
    college = get_college(code)
    if not college:
        raise HTTPException(status_code=404, detail="College not found")
    return college


@router.post("/colleges", response_model=CollegeOut)
async def post_college(input: CollegeInput, request: Request):
    """Add a college and open its General Chat room"""
    require_admin(request, Capability.manage_colleges)
    if not input.name.strip() or not input.code.strip():
        raise HTTPException(status_code=400, detail="Name and code are required")
    return create_college(input.name, input.code)


@router.delete("/colleges/{code}", response_model=SuccessResponse)
async def delete_college(code: str, request: Request):
    require_admin(request, Capability.manage_colleges)
    if not deactivate_college(code):
        raise HTTPException(status_code=404, detail="College not found")
    return SuccessResponse(success=True, message="College deactivated")
