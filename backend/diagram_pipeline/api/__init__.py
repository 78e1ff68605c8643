from diagram_pipeline.api.routes import router

__all__ = ["router"]
