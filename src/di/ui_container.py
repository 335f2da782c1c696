from dependency_injector import providers
from di.container import Container
from ui.memory_map_page import MemoryMapPage


class UIContainer(Container):
    """Services plus the Streamlit pages. Only the Streamlit entry point builds this."""

    memory_map_page = providers.Singleton(
        MemoryMapPage,
        settings=Container.settings,
        identity_client=Container.identity_client,
        # Resolved lazily so a missing Firebase key surfaces on the page.
        memory_store_client=Container.memory_store_client.provider,
        memory_api_client=Container.memory_api_client,
        post_memory_workflow=Container.post_memory_workflow,
    )
