"""Query service: reads the coffee NFT global state back from the node."""

from typing import Any, Callable, Dict, Iterator, List, Optional

import structlog

from momentx.core.exceptions import ObjectFieldError
from momentx.core.models import DynamicFieldPage, QueryReport
from momentx.data.sui_client import SuiClient
from momentx.utils.reliability import track_performance

logger = structlog.get_logger(__name__)

MERCHANTS_PATH = "details.data.fields.merchants.fields.contents"
COFFEE_TABLE_ID_PATH = "details.data.fields.CoffeeNFTs.fields.id.id"

Reporter = Callable[[str, Any], None]


def extract_field(obj: Dict[str, Any], path: str) -> Any:
    """
    Walk a dotted path through nested dictionaries.

    Raises:
        ObjectFieldError: When any segment is missing
    """
    current: Any = obj
    walked = []
    for key in path.split("."):
        walked.append(key)
        if not isinstance(current, dict) or key not in current:
            raise ObjectFieldError(
                f"Object field '{'.'.join(walked)}' not found",
                path=path,
                details={"missing": ".".join(walked)},
            )
        current = current[key]
    return current


def _noop_reporter(label: str, payload: Any) -> None:
    pass


class QueryService:
    """Read merchants and coffee NFTs from the global object."""

    def __init__(self, client: SuiClient, page_limit: Optional[int] = None):
        self.client = client
        self.page_limit = page_limit

    def get_global_object(self, global_object_id: str) -> Dict[str, Any]:
        return self.client.get_object(global_object_id)

    def list_merchants(self, global_object: Dict[str, Any]) -> Any:
        return extract_field(global_object, MERCHANTS_PATH)

    def coffee_table_id(self, global_object: Dict[str, Any]) -> str:
        return extract_field(global_object, COFFEE_TABLE_ID_PATH)

    def iter_dynamic_field_pages(self, collection_id: str) -> Iterator[DynamicFieldPage]:
        """
        Yield pages of the collection until the node returns a null cursor.

        At least one page is always requested.
        """
        cursor: Optional[str] = None
        while True:
            page = self.client.get_dynamic_fields(collection_id, cursor, self.page_limit)
            logger.debug(
                "Dynamic field page fetched",
                collection_id=collection_id,
                entries=len(page.data),
                state=page.state.value,
            )
            yield page
            if page.next_cursor is None:
                break
            cursor = page.next_cursor

    def fetch_page_objects(self, page: DynamicFieldPage) -> List[Dict[str, Any]]:
        return [self.client.get_object(entry.object_id) for entry in page.data]

    def nft_by_user(self, collection_id: str, user_address: str) -> Dict[str, Any]:
        return self.client.get_dynamic_field_object(collection_id, user_address)

    @track_performance("query_phase")
    def run_queries(
        self,
        global_object_id: str,
        user_address: Optional[str] = None,
        reporter: Optional[Reporter] = None,
    ) -> QueryReport:
        """
        Run the full query phase against a deployment.

        Args:
            global_object_id: Global object created at publish time
            user_address: When given, also fetch that user's NFT
            reporter: Called with (label, payload) for every fetched item

        Returns:
            QueryReport with everything fetched
        """
        report_item = reporter or _noop_reporter

        global_object = self.get_global_object(global_object_id)
        report_item("globalObject", global_object)

        merchants = self.list_merchants(global_object)
        report_item("merchants", merchants)

        collection_id = self.coffee_table_id(global_object)
        report = QueryReport(
            global_object=global_object, merchants=merchants, collection_id=collection_id
        )

        for page in self.iter_dynamic_field_pages(collection_id):
            report.pages.append(page)
            report_item("coffeeNFTs", page.raw or page.model_dump(mode="json"))
            for nft_object in self.fetch_page_objects(page):
                report.nft_objects.append(nft_object)
                report_item("nftObject", nft_object)

        if user_address:
            report.nft_by_user = self.nft_by_user(collection_id, user_address)
            report_item("coffeeNFTByUser", report.nft_by_user)

        logger.info(
            "Queries completed",
            collection_id=collection_id,
            pages=len(report.pages),
            nfts=len(report.nft_objects),
        )
        return report
