"""Infrastructure adapters: storage, PDF rendering and email delivery."""
