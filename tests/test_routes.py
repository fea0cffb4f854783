from __future__ import annotations

import pytest


@pytest.mark.asyncio
async def test_locales_endpoint(client) -> None:
    response = await client.get("/locales")

    assert response.status_code == 200
    assert response.json() == {"locales": ["es", "en"]}


@pytest.mark.asyncio
async def test_list_chapters(client) -> None:
    response = await client.get("/chapters", params={"locale": "es"})

    assert response.status_code == 200
    data = response.json()
    assert [chapter["id"] for chapter in data] == ["clean-architecture", "design-patterns"]
    assert data[1]["sections"][1] == {"name": "Puertos", "tagId": "puertos"}


@pytest.mark.asyncio
async def test_unknown_locale_is_404(client) -> None:
    response = await client.get("/chapters", params={"locale": "fr"})

    assert response.status_code == 404
    assert "locale not found" in response.json()["detail"]


@pytest.mark.asyncio
async def test_read_chapter_and_section(client) -> None:
    full = await client.get("/chapters/clean-architecture", params={"locale": "en"})
    section = await client.get(
        "/chapters/design-patterns", params={"locale": "es", "sectionId": "puertos"}
    )

    assert full.status_code == 200
    assert full.json()["text"].startswith("# Clean Architecture\n\n")
    assert section.status_code == 200
    assert section.json()["text"] == "## Puertos\n\nUn puerto define lo que el dominio necesita."


@pytest.mark.asyncio
async def test_read_missing_section_is_404(client) -> None:
    response = await client.get(
        "/chapters/design-patterns", params={"locale": "es", "sectionId": "nope"}
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_book_index(client) -> None:
    response = await client.get("/book-index", params={"locale": "en"})

    assert response.status_code == 200
    assert response.json()["totalChapters"] == 1


@pytest.mark.asyncio
async def test_keyword_search(client) -> None:
    response = await client.get("/search", params={"query": "adaptador", "locale": "es"})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["results"][0]["chapterId"] == "design-patterns"


@pytest.mark.asyncio
async def test_keyword_search_requires_query(client) -> None:
    response = await client.get("/search", params={"query": "  "})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_semantic_search_before_index_is_409(client) -> None:
    response = await client.get("/semantic/search", params={"query": "adaptador"})

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_build_index_then_semantic_search(client) -> None:
    build = await client.post("/semantic/index", json={"locale": "es"})

    assert build.status_code == 200
    summary = build.json()
    assert summary["locales"] == ["es"]
    assert summary["chunks"] == 4
    assert summary["message"] == "Successfully indexed 4 chunks from 1 locale(s)"

    status = await client.get("/semantic/status")
    assert status.json() == {"available": True, "indexed": True, "chunks": 4, "provider": "keyword"}

    search = await client.get(
        "/semantic/search", params={"query": "adaptador", "locale": "es", "topK": 2}
    )
    assert search.status_code == 200
    results = search.json()["results"]
    assert len(results) == 2
    assert results[0]["section"] == "Adaptadores"


@pytest.mark.asyncio
async def test_build_index_unknown_locale_is_404(client) -> None:
    response = await client.post("/semantic/index", json={"locale": "fr"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_semantic_endpoints_without_backend(client, service) -> None:
    service.semantic = None

    status = await client.get("/semantic/status")
    build = await client.post("/semantic/index", json={})

    assert status.json()["provider"] == "none"
    assert build.status_code == 503


@pytest.mark.asyncio
async def test_prompt_endpoints(client) -> None:
    explain = await client.get("/prompts/explain-concept", params={"concept": "capas"})
    compare = await client.get(
        "/prompts/compare-patterns", params={"patternA": "adaptador", "patternB": "puerto"}
    )
    summary = await client.get("/prompts/summarize-chapter", params={"chapterId": "missing"})

    assert explain.status_code == 200
    assert "capas" in explain.json()["text"]
    assert compare.json()["description"] == "Compare 'adaptador' vs 'puerto'"
    assert summary.status_code == 200
    assert summary.json()["text"] == "Could not find chapter: missing"
