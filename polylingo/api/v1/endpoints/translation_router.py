from fastapi import APIRouter, Depends, Query, status

from polylingo.core.security_dependencies import enforce_rate_limit, get_device_id, verify_api_key
from polylingo.interfaces.usage_gate import IUsageGate
from polylingo.schemas.common_schemas import MessageResponse
from polylingo.schemas.translation_schemas import (
    BatchCreate,
    BatchResponse,
    TranslateRequest,
    TranslateResponse,
    UnitResponse,
)
from polylingo.services.service_dependencies import get_translation_service, get_usage_gate
from polylingo.services.translation.orchestrator import TranslationBatch
from polylingo.services.translation.translation_service import TranslationService
from polylingo.services.translation.translation_unit import TranslationUnit

router = APIRouter(tags=["translations"], dependencies=[Depends(verify_api_key)])


def unit_to_response(unit: TranslationUnit) -> UnitResponse:
    return UnitResponse(
        target_language=unit.target_language,
        status=unit.status.value,
        retry_count=unit.retry_count,
        can_retry=unit.can_retry,
        max_retries_reached=unit.max_retries_reached,
        error=unit.error,
        result=unit.result,
    )


def batch_to_response(batch: TranslationBatch) -> BatchResponse:
    return BatchResponse(
        batch_id=batch.batch_id,
        source_text=batch.text,
        source_language=batch.source_language,
        target_languages=batch.target_languages,
        status=batch.reported_status.value,
        is_complete=batch.is_complete,
        successful_count=len(batch.successful_results),
        units=[unit_to_response(unit) for unit in batch.units],
        results=list(batch.results),
    )


@router.post("/translate", response_model=TranslateResponse, dependencies=[Depends(enforce_rate_limit)])
async def translate(
    request_data: TranslateRequest,
    usage_gate: IUsageGate = Depends(get_usage_gate),
    translation_service: TranslationService = Depends(get_translation_service),
) -> TranslateResponse:
    """
    Translate text into one target language.
    :param request_data: Text with source and target language
    :param usage_gate: Daily quota of the requesting device
    :param translation_service: Service instance handling translations
    :return: Translation with pronunciation and meanings
    """
    return await translation_service.translate_single(
        text=request_data.text,
        source_language=request_data.source_language,
        target_language=request_data.target_language,
        usage_gate=usage_gate,
    )


@router.post("/translations/batches", response_model=BatchResponse, status_code=status.HTTP_201_CREATED)
async def start_batch(
    batch_data: BatchCreate,
    wait: bool = Query(default=False, description="Respond once every unit is settled"),
    device_id: str = Depends(get_device_id),
    usage_gate: IUsageGate = Depends(get_usage_gate),
    translation_service: TranslationService = Depends(get_translation_service),
) -> BatchResponse:
    """
    Translate text into several target languages at once.

    A new batch from the same device cancels the device's previous batch.

    :param batch_data: Text, source language and ordered target languages
    :param wait: Wait for completion instead of returning the running batch
    :param device_id: Client identity, also the supersession key
    :param usage_gate: Daily quota of the requesting device
    :param translation_service: Service instance handling translations
    :return: Batch snapshot
    """
    batch = await translation_service.start_batch(
        text=batch_data.text,
        source_language=batch_data.source_language,
        target_languages=batch_data.target_languages,
        usage_gate=usage_gate,
        session_key=device_id,
    )
    if wait:
        batch = await translation_service.wait_for_batch(batch.batch_id)
    return batch_to_response(batch)


@router.get("/translations/batches/{batch_id}", response_model=BatchResponse)
async def get_batch(
    batch_id: str,
    translation_service: TranslationService = Depends(get_translation_service),
) -> BatchResponse:
    """
    Get the current state of a batch.
    :param batch_id: Batch ID
    :param translation_service: Service instance handling translations
    :return: Batch snapshot with results in target order
    """
    return batch_to_response(translation_service.get_batch(batch_id))


@router.post("/translations/batches/{batch_id}/units/{target_language}/retry", response_model=UnitResponse)
async def retry_unit(
    batch_id: str,
    target_language: str,
    wait: bool = Query(default=False, description="Respond once the retried unit is settled"),
    usage_gate: IUsageGate = Depends(get_usage_gate),
    translation_service: TranslationService = Depends(get_translation_service),
) -> UnitResponse:
    """
    Retry one unit after a timeout or error.
    :param batch_id: Batch ID
    :param target_language: Target language of the unit
    :param wait: Wait for the retried unit to settle
    :param usage_gate: Daily quota of the requesting device
    :param translation_service: Service instance handling translations
    :return: Unit snapshot
    """
    unit = await translation_service.retry_unit(batch_id, target_language.lower(), usage_gate)
    if wait:
        await unit.wait_settled()
    return unit_to_response(unit)


@router.delete("/translations/batches/{batch_id}/units/{target_language}", response_model=UnitResponse)
async def cancel_unit(
    batch_id: str,
    target_language: str,
    translation_service: TranslationService = Depends(get_translation_service),
) -> UnitResponse:
    """
    Cancel one unit; the other units of the batch keep running.
    :param batch_id: Batch ID
    :param target_language: Target language of the unit
    :param translation_service: Service instance handling translations
    :return: Unit snapshot
    """
    return unit_to_response(translation_service.cancel_unit(batch_id, target_language.lower()))


@router.delete("/translations/batches/{batch_id}", response_model=MessageResponse)
async def cancel_batch(
    batch_id: str,
    translation_service: TranslationService = Depends(get_translation_service),
) -> MessageResponse:
    """
    Cancel a batch and discard its results.
    :param batch_id: Batch ID
    :param translation_service: Service instance handling translations
    :return: Confirmation message
    """
    translation_service.cancel_batch(batch_id)
    return MessageResponse(message=f"Batch '{batch_id}' cancelled")
