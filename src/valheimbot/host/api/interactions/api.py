# The interactions API - the single endpoint Discord posts slash commands to

import logging
from typing import Annotated, Union

import pydantic
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from valheimbot.exceptions import InvalidPublicKeyError
from valheimbot.host.api.shared.injectors import (
    command_executor,
    response_dispatcher,
    signature_verifier,
)
from valheimbot.host.dispatcher import ResponseDispatcher
from valheimbot.host.executor import CommandExecutor
from valheimbot.host.signature import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    SignatureVerifier,
)
from valheimbot.models import (
    Interaction,
    InteractionResponse,
    InteractionType,
    PingResponse,
)

router = APIRouter()

logger = logging.getLogger(__name__)


@router.post("/interactions")
async def interactions(
    request: Request,
    background_tasks: BackgroundTasks,
    verifier: Annotated[SignatureVerifier, Depends(signature_verifier)],
    executor: Annotated[CommandExecutor, Depends(command_executor)],
    dispatcher: Annotated[ResponseDispatcher, Depends(response_dispatcher)],
) -> Union[PingResponse, InteractionResponse]:
    """
    Handle an interaction from Discord.

    Requests are rejected with 401 unless they carry a valid signature, and
    with 400 if the body is not an interaction the bot understands. Pings are
    acknowledged, application commands are executed and answered with an
    ephemeral message. Start and stop results are also broadcast to the
    channel once the reply has been sent.
    """
    body = await request.body()

    try:
        verified = verifier.verify(
            request.headers.get(SIGNATURE_HEADER),
            request.headers.get(TIMESTAMP_HEADER),
            body,
        )
    except InvalidPublicKeyError as e:
        logger.error("cannot verify interactions: %s", e)
        raise HTTPException(status_code=401, detail="invalid discord public key")
    if not verified:
        logger.warning("rejecting interaction with bad signature")
        raise HTTPException(status_code=401, detail="signature mismatch")

    try:
        interaction = Interaction.model_validate_json(body)
    except pydantic.ValidationError as e:
        logger.warning("could not decode interaction: %s", e)
        raise HTTPException(status_code=400, detail="could not read interaction")

    match interaction.type:
        case InteractionType.PING:
            return PingResponse()
        case InteractionType.APPLICATION_COMMAND:
            # every collaborator blocks on the network, keep it off the event loop
            result = await run_in_threadpool(
                executor.execute,
                interaction.command_name,
                interaction.sub_option_name,
            )
            return dispatcher.reply(result, background_tasks)
        case _:
            logger.warning("unknown interaction type %s", interaction.type)
            raise HTTPException(status_code=400, detail="unknown interaction type")
