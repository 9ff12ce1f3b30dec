from typing import List, Optional

from pydantic import BaseModel


class CategoryRef(BaseModel):
    id: int
    name: str


class CategoryInfo(BaseModel):
    id: int
    name: str
    parent: Optional[CategoryRef] = None


class PriceRangeOut(BaseModel):
    min: float
    max: float


class OptionPreviewOut(BaseModel):
    name: str
    displayName: str
    availableValues: List[str] = []


class VariantPreviewOut(BaseModel):
    totalVariants: int
    options: List[OptionPreviewOut] = []


class RelatedProductOut(BaseModel):
    id: int
    name: str
    sellerId: int
    brand: str
    sku: str
    tags: List[str] = []
    categoryId: int
    category: CategoryInfo
    shortDescription: Optional[str] = None
    priceRange: Optional[PriceRangeOut] = None
    allowPurchase: bool = False
    hasVariants: bool = False
    variantPreview: Optional[VariantPreviewOut] = None
    score: int
    strategyUsed: str
    relationReason: str
    createdAt: Optional[str] = None


class PaginationOut(BaseModel):
    currentPage: int
    totalPages: int
    totalItems: int
    itemsPerPage: int
    hasNext: bool
    hasPrev: bool


class RelatedMetaOut(BaseModel):
    strategiesUsed: List[str] = []
    totalStrategies: int
    avgScore: float


class RelatedProductsResponse(BaseModel):
    relatedProducts: List[RelatedProductOut] = []
    pagination: PaginationOut
    meta: RelatedMetaOut


class ErrorResponse(BaseModel):
    error: str
    code: str
