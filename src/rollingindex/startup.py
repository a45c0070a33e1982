# Explicit startup: connect, provision the template, then hand out a repository

import logging

from .config import load_config
from .opensearch.client import check_connection, get_opensearch_client
from .provisioner import TemplateProvisioner
from .repository import MessageRepository
from .router import BucketRouter
from .schema import message_schema
from .store import DocumentStore

logger = logging.getLogger(__name__)


def build_components(client, cfg):
	"""Wire store, provisioner and repository for *client* without touching the network."""
	schema = message_schema(cfg.index_name)
	store = DocumentStore(client, template_api=cfg.template_api)
	provisioner = TemplateProvisioner(
		store,
		schema,
		template_name=cfg.template_name,
		index_pattern=cfg.index_pattern,
	)
	router = BucketRouter(schema.name, alias=schema.alias, granularity=cfg.granularity)
	repository = MessageRepository(store, router, search_limit=cfg.search_limit)
	return provisioner, repository


def start(cfg=None, client=None) -> MessageRepository:
	"""Run the startup sequence and return a repository ready for traffic.

	The template is provisioned before anything is written; a ProvisionError
	(or a connection error) propagates so the caller can abort.
	"""
	cfg = cfg or load_config()
	if client is None:
		client = get_opensearch_client(cfg)
		check_connection(client, cfg)
	provisioner, repository = build_components(client, cfg)
	provisioner.ensure_template()
	logger.info("Rolling index ready: writes to '%s-*', reads from '%s'", cfg.index_name, repository.router.search_target())
	return repository
