from fastapi import FastAPI, HTTPException # type: ignore
from pydantic import BaseModel # type: ignore
from typing import Any, Dict, List

from entity_metadata.config import (
    DEFAULT_GENERATOR,
    DEFAULT_LANGUAGE_LEVEL,
    DEFAULT_SOURCE_DIRECTORY,
    GenerationConfig,
    JavaLanguageLevel,
)
from entity_metadata.errors import ConfigurationError, MetadataError, MetadataGenerationError
from entity_metadata.pipeline import generate_metadata, scan_entities

app = FastAPI(title="Entity Metadata Generator (Java entities -> static metadata)")


class ScanRequest(BaseModel):
    base_dir: str
    package_name: str
    source_directory: str = str(DEFAULT_SOURCE_DIRECTORY)
    language_level: JavaLanguageLevel = DEFAULT_LANGUAGE_LEVEL


class GenerateRequest(ScanRequest):
    output_directory: str
    generator: str = DEFAULT_GENERATOR


class ScanResponse(BaseModel):
    graph: Dict[str, Any]     # { "nodes": [...], "edges": [...] }
    hierarchy: str


class GenerateResponse(ScanResponse):
    output_directory: str
    generated_files: List[str]


def _config(req: ScanRequest, **extra: Any) -> GenerationConfig:
    try:
        return GenerationConfig.from_options(
            base_dir=req.base_dir,
            package_name=req.package_name,
            source_directory=req.source_directory,
            language_level=req.language_level,
            **extra,
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/entities", response_model=ScanResponse)
def entities(req: ScanRequest):
    # output directory is not used by a scan
    config = _config(req, output_directory=req.base_dir)
    try:
        scan = scan_entities(config)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except MetadataError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return ScanResponse(
        graph=scan.graph.to_debug_json(scan.entity_fields),
        hierarchy=scan.graph.format_hierarchy(),
    )


@app.post("/generate", response_model=GenerateResponse)
def generate(req: GenerateRequest):
    config = _config(req, output_directory=req.output_directory, generator=req.generator)
    try:
        result = generate_metadata(config)
    except MetadataGenerationError as e:
        status = 400 if isinstance(e.__cause__, ConfigurationError) else 500
        raise HTTPException(status_code=status, detail=str(e))

    return GenerateResponse(
        graph=result.graph.to_debug_json(result.entity_fields),
        hierarchy=result.graph.format_hierarchy(),
        output_directory=str(result.output_directory),
        generated_files=[str(p) for p in result.generated_files],
    )
