from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import logging
import os
import base64
import binascii

from transmute.core.errors import TransmuteError
from transmute.core.io import AudioIO
from transmute.core.types import TransformationType
from transmute.params.clamp import clamp_params
from transmute.params.contract import to_engine_params
from transmute.params.resolve import resolve_params
from transmute.params.schema import params_for
from transmute.transforms.engine import TransformEngine

# Configure Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("transmute")

app = FastAPI(
    title="Transmute Engine",
    version="1.0.0",
    description="Source to target audio transformation engine"
)

# CORS (Allow Frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

engine = TransformEngine(max_workers=int(os.environ.get("TRANSMUTE_MORPH_WORKERS", "2")))


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "transmute-engine"}


@app.get("/transformations")
async def list_transformations():
    """
    Catalog of transformations with the schema of the params each one reads.
    """
    return {
        "transformations": [
            {"id": t.value, "label": t.label, "params": params_for(t)}
            for t in TransformationType
        ]
    }


def _decode_audio(payload: str, field: str):
    try:
        return AudioIO.from_bytes(base64.b64decode(payload, validate=True))
    except (binascii.Error, ValueError, RuntimeError) as exc:
        raise ValueError(f"Could not decode {field} audio: {exc}") from exc


@app.post("/transform")
async def transform(body: dict):
    """
    Runs one transformation on base64-encoded source/target audio.
    Body: { transformation, source, target, params, transformA, transformB, seed }
    Returns JSON with base64-encoded WAV audio, sample_rate and resolved_params.
    """
    name = body.get("transformation")
    if not name:
        return {"status": "error", "message": "Missing transformation"}
    if not body.get("source") or not body.get("target"):
        return {"status": "error", "message": "Both source and target audio are required"}

    try:
        source = _decode_audio(body["source"], "source")
        target = _decode_audio(body["target"], "target")
    except ValueError as exc:
        logger.warning("%s", exc)
        return {"status": "error", "message": str(exc)}

    # Contract: strip unknown keys, then defaults + bounds
    params = to_engine_params(body.get("params") or {})
    if body.get("seed") is not None:
        params["seed"] = body["seed"]
    if params.get("seed") is not None:
        try:
            params["seed"] = int(params["seed"])
        except (TypeError, ValueError):
            return {"status": "error", "message": f"seed must be an integer, got {params['seed']!r}"}
    resolved = clamp_params(resolve_params(params))

    try:
        result = engine.transform(
            name, source, target, resolved,
            transform_a=body.get("transformA"),
            transform_b=body.get("transformB"),
        )
    except TransmuteError as exc:
        logger.warning("Transformation %r failed: %s", name, exc)
        return {"status": "error", "message": str(exc)}

    wav_bytes = AudioIO.to_bytes(result, format="WAV")

    return {
        "audio": base64.b64encode(wav_bytes).decode("utf-8"),
        "sample_rate": result.sample_rate,
        "resolved_params": resolved,
    }


if __name__ == "__main__":
    uvicorn.run(
        "transmute.main:app",
        host=os.environ.get("TRANSMUTE_HOST", "0.0.0.0"),
        port=int(os.environ.get("TRANSMUTE_PORT", "8000")),
        reload=True,
    )
