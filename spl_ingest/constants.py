"""SPL vocabulary: namespaces, element names, OIDs and indexing codes."""

import re

SPL_NAMESPACE = "urn:hl7-org:v3"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"

# Content block elements
PARAGRAPH = "paragraph"
LIST = "list"
TABLE = "table"
EXCERPT = "excerpt"
HIGHLIGHT = "highlight"
RENDER_MULTIMEDIA = "renderMultimedia"

# Structural elements
SECTION = "section"
COMPONENT = "component"
STRUCTURED_BODY = "structuredBody"
TEXT = "text"
TITLE = "title"
CODE = "code"
ID = "id"
SET_ID = "setId"
VERSION_NUMBER = "versionNumber"
EFFECTIVE_TIME = "effectiveTime"
CAPTION = "caption"
ITEM = "item"
NAME = "name"
VALUE = "value"
REFERENCE = "reference"
OBSERVATION_MEDIA = "observationMedia"

# Table elements
THEAD = "thead"
TBODY = "tbody"
TFOOT = "tfoot"
TR = "tr"
TH = "th"
TD = "td"
COL = "col"
COLGROUP = "colgroup"

# Indexing elements
SUBJECT = "subject"
SUBJECT2 = "subject2"
SUBJECT_OF = "subjectOf"
IDENTIFIED_SUBSTANCE = "identifiedSubstance"
AS_SPECIALIZED_KIND = "asSpecializedKind"
GENERALIZED_MATERIAL_KIND = "generalizedMaterialKind"
MANUFACTURED_PRODUCT = "manufacturedProduct"
AS_EQUIVALENT_ENTITY = "asEquivalentEntity"
DEFINING_MATERIAL_KIND = "definingMaterialKind"
FORM_CODE = "formCode"
AS_CONTENT = "asContent"
CONTAINER_PACKAGED_PRODUCT = "containerPackagedProduct"
CHARACTERISTIC = "characteristic"
SUBSTANCE_ADMINISTRATION = "substanceAdministration"
ISSUE = "issue"
SUBSTANCE_ADMINISTRATION_CRITERION = "substanceAdministrationCriterion"
CONSUMABLE = "consumable"
ADMINISTRABLE_MATERIAL = "administrableMaterial"
ADMINISTRABLE_MATERIAL_KIND = "administrableMaterialKind"
RISK = "risk"
CONSEQUENCE_OBSERVATION = "consequenceObservation"
COMPONENT_OF = "componentOf"
PROTOCOL = "protocol"

# Identifier systems
UNII_OID = "2.16.840.1.113883.4.9"
NCT_ROOT_OID = "2.16.840.1.113883.3.1077"

# Indexing document and section codes
INDEXING_SECTION_CODE = "48779-3"
BILLING_UNIT_DOCUMENT_CODE = "71446-9"
PRODUCT_CONCEPT_DOCUMENT_CODE = "71445-1"
INTERACTION_DOCUMENT_CODE = "71444-4"

BILLING_UNIT_CHARACTERISTIC = "NCPDPBILLINGUNIT"
CODED_VALUE_TYPES = ("CV", "CE")

NCT_PATTERN = re.compile(r"^NCT\d{8}$")
NDC_PATTERN = re.compile(r"^\d{4,5}-\d{3,4}-\d{1,2}$")
