"""Text-generation primitive shared by every agent."""

import logging

from langchain_anthropic import ChatAnthropic
from langchain_google_genai import ChatGoogleGenerativeAI

from objproof.errors import CollaboratorError, GenerationServiceError
from objproof.utils.parsing import invoke_with_retry, parse_json_object, response_text

logger = logging.getLogger(__name__)

_CORRECTION = (
    "Your previous response did not match the required JSON schema. "
    "Respond again with ONLY the raw JSON object — no markdown fences, no commentary."
)


def build_chat_model(model_id: str, max_output_tokens: int, temperature: float):
    """Return the langchain chat model serving ``model_id``.

    Gemini ids go to Google; every other id is assumed to be a Claude model.
    """
    if model_id.startswith("gemini"):
        return ChatGoogleGenerativeAI(
            model=model_id,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )
    return ChatAnthropic(model=model_id, temperature=temperature, max_tokens=max_output_tokens)


def generate_text(
    prompt: str,
    model_id: str,
    max_output_tokens: int,
    temperature: float,
    system: str | None = None,
) -> str:
    """Run one prompt through the model and return the generated text.

    Transient provider errors are retried; whatever still fails is raised as
    GenerationServiceError.
    """
    llm = build_chat_model(model_id, max_output_tokens, temperature)

    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    try:
        response = invoke_with_retry(llm, messages)
    except Exception as exc:
        raise GenerationServiceError(f"Generation with {model_id} failed: {exc}") from exc

    return response_text(response)


def generate_json(
    prompt: str,
    validate,
    *,
    name: str,
    model_id: str,
    max_output_tokens: int,
    temperature: float,
    system: str | None = None,
):
    """Generate a JSON object and convert it with ``validate``.

    ``validate`` takes the parsed dict and returns the domain object, raising
    ValueError when the shape is wrong. A malformed first response gets one
    re-prompt; a second failure raises CollaboratorError.
    """
    text = generate_text(prompt, model_id, max_output_tokens, temperature, system=system)
    try:
        return validate(parse_json_object(text))
    except ValueError as exc:
        logger.warning("%s returned an invalid response (%s); re-prompting once.", name, exc)

    retry_prompt = f"{prompt}\n\n## Previous Response\n{text}\n\n{_CORRECTION}"
    text = generate_text(retry_prompt, model_id, max_output_tokens, temperature, system=system)
    try:
        return validate(parse_json_object(text))
    except ValueError as exc:
        raise CollaboratorError(f"{name} returned an invalid response twice: {exc}") from exc
