import pytest

from app.core.interfaces import TMDBError, TMDBResponse
from app.core.tmdb_service import get_movie_service, get_person_service
from app.main import app


@pytest.fixture
def tmdb_api(client, fake_tmdb, movie_service, person_service):
    app.dependency_overrides[get_movie_service] = lambda: movie_service
    app.dependency_overrides[get_person_service] = lambda: person_service
    return client


def test_movie_details(tmdb_api, fake_tmdb):
    fake_tmdb.responses["movie/550"] = {"id": 550, "title": "Бійцівський клуб"}
    response = tmdb_api.get("/api/movies/550")
    assert response.status_code == 200
    assert response.json()["title"] == "Бійцівський клуб"


def test_missing_movie_is_404(tmdb_api):
    response = tmdb_api.get("/api/movies/999")
    assert response.status_code == 404
    assert response.json() == {"error": "Movie not found"}


def test_upstream_failure_is_502(tmdb_api, fake_tmdb):
    fake_tmdb.responses["movie/550/credits"] = TMDBResponse({}, 500, False)
    assert tmdb_api.get("/api/movies/550/credits").status_code == 502

    fake_tmdb.responses["movie/550/images"] = TMDBError("Request failed: timeout")
    response = tmdb_api.get("/api/movies/550/images")
    assert response.status_code == 502
    assert response.json() == {"error": "Request failed: timeout"}


def test_non_numeric_movie_id(tmdb_api):
    response = tmdb_api.get("/api/movies/abc/credits")
    assert response.status_code == 400


def test_search_requires_query(tmdb_api, fake_tmdb):
    response = tmdb_api.get("/api/movies/search")
    assert response.status_code == 400
    assert response.json() == {"error": "Query parameter is required"}

    fake_tmdb.responses["search/movie"] = {"results": [{"id": 1, "title": "Дюна"}], "page": 2}
    response = tmdb_api.get("/api/movies/search", params={"query": " дюна ", "page": 2})
    assert response.status_code == 200
    assert fake_tmdb.calls[-1] == ("search/movie", {"query": "дюна", "page": 2})


def test_popular_and_now_playing(tmdb_api, fake_tmdb):
    fake_tmdb.responses["movie/popular"] = {"results": [{"id": 1}]}
    fake_tmdb.responses["movie/now_playing"] = {"results": [{"id": 2}]}
    assert tmdb_api.get("/api/movies/popular").json()["results"] == [{"id": 1}]
    assert tmdb_api.get("/api/movies/now-playing").json()["results"] == [{"id": 2}]


def test_providers_for_region(tmdb_api, fake_tmdb):
    fake_tmdb.responses["movie/550/watch/providers"] = {
        "id": 550,
        "results": {"UA": {"flatrate": [{"provider_name": "Megogo"}]}, "US": {"flatrate": []}},
    }
    response = tmdb_api.get("/api/movies/550/providers", params={"region": "ua"})
    assert response.json() == {"id": 550, "results": {"UA": {"flatrate": [{"provider_name": "Megogo"}]}}}

    response = tmdb_api.get("/api/movies/550/providers", params={"region": "PL"})
    assert response.json() == {"id": 550, "results": {}}

    assert set(tmdb_api.get("/api/movies/550/providers").json()["results"]) == {"UA", "US"}


def test_random_movie_skips_posterless_results(tmdb_api, fake_tmdb):
    fake_tmdb.responses["discover/movie"] = {"results": [{"id": 1, "poster_path": None}]}
    fake_tmdb.responses["movie/popular"] = {"results": [{"id": 2, "title": "Дюна", "poster_path": "/dune.jpg"}]}

    response = tmdb_api.get("/api/movies/random", params={"minRating": 7, "genre": "878"})
    assert response.status_code == 200
    assert response.json()["id"] == 2

    first_endpoint, first_params = fake_tmdb.calls[0]
    assert first_endpoint == "discover/movie"
    assert first_params["vote_average.gte"] == 7
    assert first_params["with_genres"] == "878"


def test_random_movie_not_found(tmdb_api):
    response = tmdb_api.get("/api/movies/random")
    assert response.status_code == 404
    assert response.json() == {"error": "No movies found"}


def test_person_endpoints(tmdb_api, fake_tmdb):
    fake_tmdb.responses["person/287"] = {"id": 287, "name": "Бред Пітт"}
    fake_tmdb.responses["person/287/movie_credits"] = {"cast": [{"id": 550}]}
    fake_tmdb.responses["person/popular"] = {"results": [{"id": 287}]}

    assert tmdb_api.get("/api/person/287").json()["name"] == "Бред Пітт"
    assert tmdb_api.get("/api/person/287/credits").json()["cast"] == [{"id": 550}]
    assert tmdb_api.get("/api/actors/popular").json()["results"] == [{"id": 287}]

    response = tmdb_api.get("/api/person/1")
    assert response.status_code == 404
    assert response.json() == {"error": "Person not found"}

    assert tmdb_api.get("/api/actors/search").status_code == 400
