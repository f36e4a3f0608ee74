"""Pydantic schemas for documents read back from the storage backend."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ManifestDocument(BaseModel):
    """
    Index of a chunk set, stored as a single small JSON blob.

    The position of an id in ``chunks`` is its chunk index. A list whose
    length differs from ``total_chunks`` is accepted here; readers fall back
    to the tag index for such manifests.
    """
    model_config = ConfigDict(populate_by_name=True)

    project_id: str = Field(alias='projectId')
    project_name: str = Field(default='', alias='projectName')
    chunk_set_id: str = Field(alias='chunkSetId')
    total_chunks: int = Field(alias='totalChunks', ge=1)
    chunks: List[str]
    created_at: Optional[str] = Field(default=None, alias='createdAt')

    def to_json(self) -> bytes:
        """Serialize with the camelCase keys readers expect."""
        return self.model_dump_json(by_alias=True).encode('utf-8')

    @staticmethod
    def looks_like_manifest(data: object) -> bool:
        """True when a decoded JSON document has the manifest shape."""
        return (
            isinstance(data, dict)
            and bool(data.get('chunkSetId'))
            and bool(data.get('totalChunks'))
            and bool(data.get('chunks'))
        )


class GraphQLTag(BaseModel):
    name: str
    value: str


class GraphQLNode(BaseModel):
    id: str
    tags: List[GraphQLTag] = []


class GraphQLEdge(BaseModel):
    cursor: Optional[str] = None
    node: GraphQLNode


class GraphQLPageInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_next_page: bool = Field(default=False, alias='hasNextPage')


class GraphQLTransactions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    edges: List[GraphQLEdge] = []
    page_info: GraphQLPageInfo = Field(default_factory=GraphQLPageInfo, alias='pageInfo')


class GraphQLData(BaseModel):
    transactions: Optional[GraphQLTransactions] = None


class GraphQLResponse(BaseModel):
    """Response envelope of a tag search query."""
    data: Optional[GraphQLData] = None
    errors: Optional[List[dict]] = None
