# billtracker/api/v1/categories.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from billtracker.api.v1.deps import get_category_repo, get_current_user
from billtracker.db import models
from billtracker.db.repositories import CategoryRepository
from billtracker.schemas.category import CategoryCreate, CategoryOut, CategoryUpdate

router = APIRouter(tags=["categories"])


def _get_owned(repo: CategoryRepository, user: models.User, category_id: int) -> models.Category:
    cat = repo.find_one(user.id, category_id)
    if not cat:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return cat


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    current_user: models.User = Depends(get_current_user),
    repo: CategoryRepository = Depends(get_category_repo),
):
    name = payload.name.strip()
    # "Luz" and "luz" are the same category for one user
    if repo.find_by_name(current_user.id, name):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category with this name already exists")
    new = models.Category(user_id=current_user.id, name=name, color=payload.color, icon=payload.icon)
    repo.db.add(new)
    repo.db.commit()
    repo.db.refresh(new)
    return new


@router.get("", response_model=List[CategoryOut])
def list_categories(current_user: models.User = Depends(get_current_user), repo: CategoryRepository = Depends(get_category_repo)):
    return repo.find_by_owner(current_user.id)


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(
    category_id: int,
    current_user: models.User = Depends(get_current_user),
    repo: CategoryRepository = Depends(get_category_repo),
):
    return _get_owned(repo, current_user, category_id)


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    current_user: models.User = Depends(get_current_user),
    repo: CategoryRepository = Depends(get_category_repo),
):
    cat = _get_owned(repo, current_user, category_id)
    if payload.name is not None:
        name = payload.name.strip()
        clash = repo.find_by_name(current_user.id, name)
        if clash and clash.id != cat.id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category with this name already exists")
        cat.name = name
    if payload.color is not None:
        cat.color = payload.color
    if payload.icon is not None:
        cat.icon = payload.icon
    repo.db.add(cat)
    repo.db.commit()
    repo.db.refresh(cat)
    return cat


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    current_user: models.User = Depends(get_current_user),
    repo: CategoryRepository = Depends(get_category_repo),
):
    # bills keep their category text; it just loses its colour in reports
    cat = _get_owned(repo, current_user, category_id)
    repo.db.delete(cat)
    repo.db.commit()
    return None
