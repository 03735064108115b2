from typing import Any, Mapping, Optional

from loguru import logger

from autograder.exceptions import ValidationError
from autograder.models.results import LaunchContext

CONTEXT_CLAIM = "https://purl.imsglobal.org/spec/lti/claim/context"
AGS_ENDPOINT_CLAIM = "https://purl.imsglobal.org/spec/lti-ags/claim/endpoint"


class LaunchContextResolver:
    REQUIRED_PARAMS = ("id_token", "user", "context")

    def resolve(self, params: Mapping[str, Any]) -> LaunchContext:
        """
        Build an immutable LaunchContext from raw launch parameters.

        Pure: no network I/O and no retries. Empty values count as missing.
        """
        values = {key: self._clean(params.get(key)) for key in self.REQUIRED_PARAMS}
        missing = [key for key in self.REQUIRED_PARAMS if not values[key]]
        if missing:
            logger.warning("launch_params_missing", missing=missing)
            raise ValidationError(f"Missing required launch parameter(s): {', '.join(missing)}")

        context = LaunchContext(
            identity_token=values["id_token"],
            user_id=values["user"],
            context_id=values["context"],
            grade_target_ref=self._clean(params.get("lineitem")),
        )
        logger.debug(
            "launch_context_resolved",
            user_id=context.user_id,
            context_id=context.context_id,
            gradeable=context.gradeable,
        )
        return context

    def from_claims(self, id_token: str, claims: Mapping[str, Any]) -> LaunchContext:
        """
        Resolve from LTI 1.3 launch claims that were already verified upstream.

        The AGS endpoint claim, when present, supplies the line item.
        """
        context_claim = claims.get(CONTEXT_CLAIM) or {}
        endpoint_claim = claims.get(AGS_ENDPOINT_CLAIM) or {}
        if not isinstance(context_claim, Mapping) or not isinstance(endpoint_claim, Mapping):
            raise ValidationError("Malformed launch claims")

        return self.resolve({
            "id_token": id_token,
            "user": claims.get("sub"),
            "context": context_claim.get("id"),
            "lineitem": endpoint_claim.get("lineitem"),
        })

    @staticmethod
    def _clean(value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None
