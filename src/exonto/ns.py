from rdflib import Graph, Namespace
from rdflib.namespace import OWL, RDF, RDFS, SKOS, XSD

# ==============================================================================
#  ONTOLOGY NAMESPACES
# ==============================================================================

CORE = Namespace("https://w3id.org/elixir-code/core#")
STRUCTURE = Namespace("https://w3id.org/elixir-code/structure#")
OTP = Namespace("https://w3id.org/elixir-code/otp#")
EVOLUTION = Namespace("https://w3id.org/elixir-code/evolution#")

PROV = Namespace("http://www.w3.org/ns/prov#")
BFO = Namespace("http://purl.obolibrary.org/obo/")
IAO = Namespace("http://purl.obolibrary.org/obo/IAO_")
DC = Namespace("http://purl.org/dc/elements/1.1/")
DCTERMS = Namespace("http://purl.org/dc/terms/")
SH = Namespace("http://www.w3.org/ns/shacl#")

PREFIXES = {
    "core": CORE,
    "struct": STRUCTURE,
    "otp": OTP,
    "evo": EVOLUTION,
    "rdf": RDF,
    "rdfs": RDFS,
    "owl": OWL,
    "xsd": XSD,
    "skos": SKOS,
    "prov": PROV,
    "bfo": BFO,
    "iao": IAO,
    "dc": DC,
    "dcterms": DCTERMS,
    "sh": SH,
}


def bind_prefixes(graph: Graph) -> Graph:
    for prefix, namespace in PREFIXES.items():
        graph.bind(prefix, namespace, override=True)
    return graph
