"""Integration tests for the Books API."""

from httpx import AsyncClient

VALID_MISSING_ID = "0" * 24


class TestBooksAPI:
    """Integration tests for the public book endpoints."""

    async def test_root(self, client: AsyncClient):
        """Test the health check."""
        response = await client.get("/")
        assert response.status_code == 200
        assert response.text == "Book Management API"

    async def test_list_books_empty(self, client: AsyncClient):
        """Test listing books when none exist."""
        response = await client.get("/books")
        assert response.status_code == 200
        assert response.json() == []

    async def test_create_book(self, client: AsyncClient):
        """Test creating a new book."""
        response = await client.post(
            "/books",
            json={
                "title": "Test Book",
                "author": "Test Author",
                "price": 9.99,
                "publishedYear": 1999,
                "imageUrl": "https://example.com/cover.jpg",
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Book created"
        assert len(data["id"]) == 24
        assert data["book"]["_id"] == data["id"]
        assert data["book"]["publishedYear"] == 1999
        assert data["book"]["createdAt"] == data["book"]["updatedAt"]
        assert "insertedCount" not in data

    async def test_create_book_missing_author(self, client: AsyncClient):
        """Test that a book without an author is rejected."""
        response = await client.post("/books", json={"title": "T", "price": 1})
        assert response.status_code == 400
        assert response.json() == {"error": "Title and author required"}

        listing = await client.get("/books")
        assert listing.json() == []

    async def test_create_book_non_numeric_price(self, client: AsyncClient):
        """Test that a malformed price is a 400, not a 422."""
        response = await client.post("/books", json={"title": "T", "author": "A", "price": "x"})
        assert response.status_code == 400
        assert "price" in response.json()["error"]

    async def test_bulk_create(self, client: AsyncClient):
        """Test creating several books in one call."""
        response = await client.post(
            "/books",
            json=[
                {"title": "One", "author": "A", "price": 1},
                {"title": "Two", "author": "B", "price": 2},
            ],
        )
        assert response.status_code == 201
        assert response.json() == {"message": "Books created", "insertedCount": 2}

        listing = await client.get("/books")
        assert sorted(book["title"] for book in listing.json()) == ["One", "Two"]

    async def test_get_book(self, client: AsyncClient, sample_book):
        """Test getting a specific book."""
        response = await client.get(f"/books/{sample_book.id}")
        assert response.status_code == 200
        data = response.json()
        assert data["_id"] == sample_book.id
        assert data["title"] == sample_book.title
        assert data["genre"] == "Fiction"

    async def test_get_book_not_found(self, client: AsyncClient):
        """Test getting a non-existent book."""
        response = await client.get(f"/books/{VALID_MISSING_ID}")
        assert response.status_code == 404
        assert response.json() == {"error": "Book not found"}

    async def test_get_book_invalid_id(self, client: AsyncClient):
        """Test that a malformed id is a 400."""
        response = await client.get("/books/not-an-id")
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid ID"}

    async def test_delete_book_cascades_to_cart(self, client: AsyncClient, sample_book):
        """Test that deleting a book removes its cart items."""
        for _ in range(2):
            response = await client.post("/cart", json={"bookId": sample_book.id})
            assert response.status_code == 201

        response = await client.delete(f"/books/{sample_book.id}")
        assert response.status_code == 200
        assert response.json() == {"message": "Book deleted", "cartItemsRemoved": 2}

        assert (await client.get(f"/books/{sample_book.id}")).status_code == 404
        assert (await client.get("/cart")).json() == []

    async def test_delete_missing_book(self, client: AsyncClient):
        """Test that deleting an unknown book still succeeds."""
        response = await client.delete(f"/books/{VALID_MISSING_ID}")
        assert response.status_code == 200


class TestAdminBooksAPI:
    """Integration tests for the admin book endpoints."""

    async def test_update_book(self, client: AsyncClient, sample_book):
        """Test updating a book merges the given fields."""
        response = await client.put(f"/admin/books/{sample_book.id}", json={"price": 5})
        assert response.status_code == 200
        assert response.json() == {"message": "Book updated"}

        data = (await client.get(f"/books/{sample_book.id}")).json()
        assert data["price"] == 5
        assert data["title"] == sample_book.title
        assert data["updatedAt"] > data["createdAt"]

    async def test_update_invalid_id(self, client: AsyncClient):
        """Test updating with a malformed id."""
        response = await client.put("/admin/books/123", json={"price": 5})
        assert response.status_code == 400

    async def test_admin_list_and_delete(self, client: AsyncClient, sample_book, other_book):
        """Test the admin list and delete routes."""
        response = await client.get("/admin/books")
        assert len(response.json()) == 2

        response = await client.delete(f"/admin/books/{other_book.id}")
        assert response.status_code == 200

        remaining = (await client.get("/admin/books")).json()
        assert [book["_id"] for book in remaining] == [sample_book.id]

    async def test_admin_requires_token(self, secured_client: AsyncClient):
        """Test that admin routes reject missing or unknown tokens."""
        response = await secured_client.get("/admin/books")
        assert response.status_code == 401

        response = await secured_client.get(
            "/admin/books", headers={"Authorization": "Bearer wrong"}
        )
        assert response.status_code == 401

    async def test_admin_accepts_configured_token(self, secured_client: AsyncClient):
        """Test that any configured token is accepted."""
        response = await secured_client.get(
            "/admin/books", headers={"Authorization": "Bearer other-token"}
        )
        assert response.status_code == 200

    async def test_public_routes_need_no_token(self, secured_client: AsyncClient):
        """Test that public book routes stay open when auth is enabled."""
        response = await secured_client.get("/books")
        assert response.status_code == 200
