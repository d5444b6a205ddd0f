import requests
import logging
from typing import Dict
from .interfaces import TMDBClientInterface, TMDBResponse, TMDBConfig, TMDBError

logger = logging.getLogger(__name__)


def _as_int(value) -> int:
    if value is None:
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        return 0


def normalize_vote_counts(data: Dict) -> Dict:
    """TMDB occasionally sends vote_count as a string or null"""
    if isinstance(data.get("results"), list):
        for item in data["results"]:
            if isinstance(item, dict) and "title" in item:
                item["vote_count"] = _as_int(item.get("vote_count"))
    elif data.get("id") and data.get("title"):
        data["vote_count"] = _as_int(data.get("vote_count"))
    return data


class TMDBClient(TMDBClientInterface):
    """Concrete implementation of TMDB client"""
    
    def __init__(self, config: TMDBConfig):
        self.config = config
        self.session = requests.Session()
        self.session.headers.update({
            "accept": "application/json"
        })
        if config.read_token:
            self.session.headers["Authorization"] = f"Bearer {config.read_token}"
    
    def make_request(self, endpoint: str, params: Dict = None, localized: bool = True) -> TMDBResponse:
        """Make HTTP request to TMDB API"""
        try:
            url = f"{self.config.base_url}/{endpoint.lstrip('/')}"
            params = dict(params or {})
            
            if self.config.api_key and not self.config.read_token:
                params['api_key'] = self.config.api_key
            
            if localized and self.config.language:
                params.setdefault('language', self.config.language)
            
            logger.info(f"Making request to: {url}")
            response = self.session.get(url, params=params, timeout=self.config.timeout)
            
            if response.status_code == 200:
                return TMDBResponse(normalize_vote_counts(response.json()), response.status_code, True)
            else:
                logger.error(f"API request failed: {response.status_code} - {response.text}")
                return TMDBResponse({}, response.status_code, False)
                
        except requests.exceptions.RequestException as e:
            logger.error(f"Request exception: {str(e)}")
            raise TMDBError(f"Request failed: {str(e)}")
        except ValueError as e:
            logger.error(f"Invalid JSON from TMDB: {str(e)}")
            raise TMDBError(f"Invalid response: {str(e)}")
