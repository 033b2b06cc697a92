from datetime import datetime, timezone

from shared.clients.store.StoreClientInterface import StoreClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.session import FilingRecord, SessionStage


class StoreClientSupabase(StoreClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._session_table = self.get_config_val("SESSION_TABLE", default="session_thread", val_type="string")
        self._record_table = self.get_config_val("RECORD_TABLE", default="extracted_data", val_type="string")
        self._session_key = self.get_config_val("SESSION_KEY", default="thread_id", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Supabase"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="SESSION_TABLE", val_type="string", default="session_thread"),
            EnvConfig(env_key="RECORD_TABLE", val_type="string", default="extracted_data"),
            EnvConfig(env_key="SESSION_KEY", val_type="string", default="thread_id"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"apikey": self._api_key, "Authorization": f"Bearer {self._api_key}"}
        else:
            return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/rest/v1/"

    def _get_endpoint_sessions(self) -> str:
        return f"/rest/v1/{self._session_table}"

    def _get_endpoint_records(self) -> str:
        return f"/rest/v1/{self._record_table}"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_session_query_params(self, session_id: str) -> dict:
        return {
            self._session_key: f"eq.{session_id}",
            "select": "*",
            "order": "created_at.desc",
            "limit": 1,
        }

    def get_record_query_params(self, session_id: str) -> dict:
        return {
            self._session_key: f"eq.{session_id}",
            "select": "*",
            "limit": 1,
        }

    def get_create_session_payload(self, session_id: str) -> list:
        return [{
            self._session_key: session_id,
            "status": SessionStage.UPLOADING.value,
            "current_step": "uploading",
        }]

    def get_update_stage_payload(self, stage: SessionStage, current_step: str | None) -> dict:
        return {"status": stage.value, "current_step": current_step}

    def get_upsert_payload(self, session_id: str, data: dict) -> list:
        return [{
            self._session_key: session_id,
            "data": data,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }]

    def get_upsert_params(self) -> dict:
        # PostgREST turns the insert into INSERT ... ON CONFLICT (key) DO UPDATE
        return {"on_conflict": self._session_key}

    def get_write_headers(self, upsert: bool = False) -> dict:
        prefer = "return=representation"
        if upsert:
            prefer = "resolution=merge-duplicates," + prefer
        return {"Prefer": prefer}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def _first_row(self, response: dict | list) -> dict | None:
        if isinstance(response, dict):
            return response or None
        if isinstance(response, list) and response and isinstance(response[0], dict):
            return response[0]
        if isinstance(response, list):
            return None
        raise ValueError(f"Unexpected response shape from {self._get_engine_name()}: {type(response).__name__}")

    def _parse_session_rows(self, response: dict | list) -> dict | None:
        row = self._first_row(response)
        if row is None:
            return None
        raw_stage = row.get("status")
        stage = raw_stage if raw_stage in {s.value for s in SessionStage} else None
        return {
            "session_id": row.get(self._session_key),
            "created_at": row.get("created_at"),
            "stage": stage,
            "current_step": row.get("current_step"),
        }

    def _parse_record_rows(self, response: dict | list) -> FilingRecord | None:
        row = self._first_row(response)
        if row is None:
            return None
        data = row.get("data")
        return FilingRecord(
            session_id=row.get(self._session_key),
            data=data if isinstance(data, dict) else {},
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
