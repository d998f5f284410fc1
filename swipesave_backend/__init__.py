"""
Swipe Save backend: ComfyUI workflow engine and the aiohttp service around it.
"""
