"""Shared fixtures: sample documents, parser and global state resets."""

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from ndc_offers import metrics
from ndc_offers.adapters.document import LxmlDocumentParser
from ndc_offers.config import reset_config
from ndc_offers.container import reset_container

MSG_NS = "http://www.iata.org/IATA/2015/EASD/00/IATA_OffersAndOrdersMessage"

RESPONSE_UUID = "3f2504e0-4f89-11d3-9a0c-0305e82c3301"
OFFER_ID = f"id-v2-{RESPONSE_UUID}-o-1"
ALACARTE_OFFER_ID = f"id-v2-{RESPONSE_UUID}-alc"

SHOPPING_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<IATA_AirShoppingRS xmlns="{MSG_NS}">
  <Response>
    <OffersGroup>
      <CarrierOffers>
        <ALaCarteOffer>
          <OfferID>{ALACARTE_OFFER_ID}</OfferID>
          <OfferItem>
            <OfferItemID>{ALACARTE_OFFER_ID}-1</OfferItemID>
            <Eligibility>
              <FlightAssociations>
                <PaxJourneyRef><PaxJourneyRefID>fl913653037</PaxJourneyRefID></PaxJourneyRef>
              </FlightAssociations>
              <PaxRefID>ADT1</PaxRefID>
            </Eligibility>
            <Service><ServiceDefinitionRefID>SD-PLUS</ServiceDefinitionRefID></Service>
            <UnitPrice><TotalAmount CurCode="AUD">45.00</TotalAmount></UnitPrice>
          </OfferItem>
          <OfferItem>
            <OfferItemID>{ALACARTE_OFFER_ID}-2</OfferItemID>
            <Eligibility>
              <FlightAssociations>
                <PaxJourneyRef><PaxJourneyRefID>fl913653037</PaxJourneyRefID></PaxJourneyRef>
              </FlightAssociations>
              <PaxRefID>ADT2</PaxRefID>
            </Eligibility>
            <Service><ServiceDefinitionRefID>SD-PLUS</ServiceDefinitionRefID></Service>
            <UnitPrice><TotalAmount CurCode="AUD">45.00</TotalAmount></UnitPrice>
          </OfferItem>
          <OfferItem>
            <OfferItemID>{ALACARTE_OFFER_ID}-3</OfferItemID>
            <Eligibility>
              <FlightAssociations>
                <PaxJourneyRef><PaxJourneyRefID>fl777000111</PaxJourneyRefID></PaxJourneyRef>
              </FlightAssociations>
              <PaxRefID>ADT1</PaxRefID>
            </Eligibility>
            <Service><ServiceDefinitionRefID>SD-MAX</ServiceDefinitionRefID></Service>
            <UnitPrice><TotalAmount CurCode="AUD">80.00</TotalAmount></UnitPrice>
          </OfferItem>
          <OfferItem>
            <OfferItemID>{ALACARTE_OFFER_ID}-4</OfferItemID>
            <Eligibility><PaxRefID>ADT1</PaxRefID></Eligibility>
            <Service><ServiceDefinitionRefID>SD-BAG</ServiceDefinitionRefID></Service>
            <UnitPrice><TotalAmount CurCode="AUD">30.00</TotalAmount></UnitPrice>
          </OfferItem>
        </ALaCarteOffer>
        <Offer>
          <OfferID>{OFFER_ID}</OfferID>
          <OwnerCode>JQ</OwnerCode>
          <TotalPrice><TotalAmount CurCode="AUD">120.00</TotalAmount></TotalPrice>
          <OfferItem>
            <OfferItemID>{OFFER_ID}-oi-1</OfferItemID>
            <FareDetail>
              <FareComponent>
                <PriceClassRefID>PC1</PriceClassRefID>
                <PaxSegmentRefID>seg913653037</PaxSegmentRefID>
              </FareComponent>
              <PaxRefID>ADT1</PaxRefID>
              <Price>
                <TotalAmount CurCode="AUD">120.00</TotalAmount>
                <BaseAmount CurCode="AUD">100.00</BaseAmount>
                <TaxSummary><TotalTaxAmount CurCode="AUD">20.00</TotalTaxAmount></TaxSummary>
              </Price>
            </FareDetail>
            <Service>
              <OfferServiceAssociation>
                <PaxJourneyRef><PaxJourneyRefID>fl913653037</PaxJourneyRefID></PaxJourneyRef>
              </OfferServiceAssociation>
            </Service>
          </OfferItem>
        </Offer>
      </CarrierOffers>
    </OffersGroup>
    <DataLists>
      <PaxJourneyList>
        <PaxJourney>
          <PaxJourneyID>fl913653037</PaxJourneyID>
          <PaxSegmentRefID>seg913653037</PaxSegmentRefID>
          <Duration>PT1H35M</Duration>
        </PaxJourney>
      </PaxJourneyList>
      <PaxSegmentList>
        <PaxSegment>
          <PaxSegmentID>seg913653037</PaxSegmentID>
          <Dep>
            <IATA_LocationCode>SYD</IATA_LocationCode>
            <AircraftScheduledDateTime>2026-11-01T08:00:00</AircraftScheduledDateTime>
          </Dep>
          <Arrival>
            <IATA_LocationCode>MEL</IATA_LocationCode>
            <AircraftScheduledDateTime>2026-11-01T09:35:00</AircraftScheduledDateTime>
          </Arrival>
          <MarketingCarrierInfo>
            <CarrierDesigCode>JQ</CarrierDesigCode>
            <MarketingCarrierFlightNumberText>501</MarketingCarrierFlightNumberText>
          </MarketingCarrierInfo>
        </PaxSegment>
      </PaxSegmentList>
      <PriceClassList>
        <PriceClass>
          <PriceClassID>PC1</PriceClassID>
          <Name>Starter</Name>
          <FareBasisCode>AOWJQ</FareBasisCode>
          <CabinType><CabinTypeCode>M</CabinTypeCode></CabinType>
        </PriceClass>
      </PriceClassList>
      <ServiceDefinitionList>
        <ServiceDefinition>
          <ServiceDefinitionID>SD-PLUS</ServiceDefinitionID>
          <Name>Plus</Name>
          <ServiceCode>P200</ServiceCode>
          <RFIC>G</RFIC>
          <RFISC>0L8</RFISC>
          <Desc><DescText>Bag, seat and flexibility</DescText></Desc>
          <ServiceBundle>
            <ServiceDefinitionRefID>SD-BAG</ServiceDefinitionRefID>
            <ServiceDefinitionRefID>SD-SEAT</ServiceDefinitionRefID>
          </ServiceBundle>
        </ServiceDefinition>
        <ServiceDefinition>
          <ServiceDefinitionID>SD-MAX</ServiceDefinitionID>
          <Name>Max</Name>
          <ServiceCode>M300</ServiceCode>
          <RFIC>G</RFIC>
          <RFISC>0L8</RFISC>
          <ServiceBundle>
            <ServiceDefinitionRefID>SD-BAG</ServiceDefinitionRefID>
          </ServiceBundle>
        </ServiceDefinition>
        <ServiceDefinition>
          <ServiceDefinitionID>SD-BAG</ServiceDefinitionID>
          <Name>20kg checked bag</Name>
          <ServiceCode>BG20</ServiceCode>
          <RFIC>C</RFIC>
          <RFISC>0C3</RFISC>
        </ServiceDefinition>
        <ServiceDefinition>
          <ServiceDefinitionID>SD-SEAT</ServiceDefinitionID>
          <Name>Standard seat</Name>
          <ServiceCode>STST</ServiceCode>
          <RFIC>A</RFIC>
          <RFISC>0B5</RFISC>
        </ServiceDefinition>
      </ServiceDefinitionList>
    </DataLists>
  </Response>
</IATA_AirShoppingRS>
"""

SHOPPING_ERROR_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<IATA_AirShoppingRS xmlns="{MSG_NS}">
  <Error>
    <Code>OF2003</Code>
    <DescText>No flights available</DescText>
  </Error>
  <Response>
    <OffersGroup>
      <CarrierOffers>
        <Offer>
          <OfferID>{OFFER_ID}</OfferID>
          <TotalPrice><TotalAmount CurCode="AUD">120.00</TotalAmount></TotalPrice>
        </Offer>
      </CarrierOffers>
    </OffersGroup>
  </Response>
</IATA_AirShoppingRS>
"""

SEAT_AVAILABILITY_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<IATA_SeatAvailabilityRS xmlns="{MSG_NS}">
  <Response>
    <ALaCarteOffer>
      <OfferID>seat-alc-1</OfferID>
      <OfferItem>
        <OfferItemID>seat-alc-1-2</OfferItemID>
        <Eligibility><PaxRefID>ADT1</PaxRefID><PaxRefID>ADT2</PaxRefID></Eligibility>
        <UnitPrice><TotalAmount CurCode="AUD">25.00</TotalAmount></UnitPrice>
      </OfferItem>
      <OfferItem>
        <OfferItemID>seat-alc-1-8</OfferItemID>
        <Eligibility><PaxRefID>CHD1</PaxRefID></Eligibility>
        <UnitPrice><TotalAmount CurCode="AUD">25.00</TotalAmount></UnitPrice>
      </OfferItem>
    </ALaCarteOffer>
    <SeatMap>
      <PaxSegmentRefID>seg913653037</PaxSegmentRefID>
      <CabinCompartment>
        <CabinTypeCode>M</CabinTypeCode>
        <FirstRowNumber>1</FirstRowNumber>
        <LastRowNumber>12</LastRowNumber>
        <SeatColumnLayout>AB</SeatColumnLayout>
        <SeatRow>
          <RowNumber>1</RowNumber>
          <Seat>
            <ColumnID>A</ColumnID>
            <OccupationStatusCode>F</OccupationStatusCode>
            <SeatCharacteristicCode>w</SeatCharacteristicCode>
            <SeatCharacteristicCode>L</SeatCharacteristicCode>
            <OfferItemRefID>seat-alc-1-2</OfferItemRefID>
            <OfferItemRefID>seat-alc-1-8</OfferItemRefID>
          </Seat>
          <Seat>
            <ColumnID>B</ColumnID>
            <OccupationStatusCode>O</OccupationStatusCode>
            <OfferItemRefID>seat-alc-1-2</OfferItemRefID>
          </Seat>
        </SeatRow>
        <SeatRow>
          <RowNumber>12</RowNumber>
          <Seat>
            <ColumnID>A</ColumnID>
            <SeatCharacteristicCode>E</SeatCharacteristicCode>
            <OfferItemRefID>seat-alc-1-2</OfferItemRefID>
          </Seat>
          <Seat>
            <ColumnID>B</ColumnID>
            <OccupationStatusCode>AVAILABLE</OccupationStatusCode>
          </Seat>
        </SeatRow>
      </CabinCompartment>
    </SeatMap>
  </Response>
</IATA_SeatAvailabilityRS>
"""

PRICE_RESPONSE_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<IATA_OfferPriceRS xmlns="{MSG_NS}">
  <Response>
    <Warning><Message>Fare rules apply</Message></Warning>
    <PricedOffer>
      <OfferID>{OFFER_ID}</OfferID>
      <OwnerCode>JQ</OwnerCode>
      <TotalPrice><TotalAmount CurCode="AUD">165.00</TotalAmount></TotalPrice>
      <OfferItem>
        <OfferItemID>{OFFER_ID}-oi-1</OfferItemID>
        <FareDetail>
          <PaxRefID>ADT1</PaxRefID>
          <Price><TotalAmount CurCode="AUD">120.00</TotalAmount></Price>
        </FareDetail>
      </OfferItem>
    </PricedOffer>
    <PricedOffer>
      <OfferRefID>{ALACARTE_OFFER_ID}</OfferRefID>
      <TotalPrice><TotalAmount CurCode="AUD">45.00</TotalAmount></TotalPrice>
      <PricedOfferItem>
        <OfferItemRefID>{ALACARTE_OFFER_ID}-1</OfferItemRefID>
        <PaxRefID>ADT1</PaxRefID>
        <Price><TotalAmount CurCode="AUD">45.00</TotalAmount></Price>
      </PricedOfferItem>
    </PricedOffer>
    <ExpirationDateTime>2026-11-01T07:00:00Z</ExpirationDateTime>
  </Response>
</IATA_OfferPriceRS>
"""

PRICE_PARTIAL_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<IATA_OfferPriceRS xmlns="{MSG_NS}">
  <Error><Code>OF4053</Code><DescText>Error selling SSRs for service bundle</DescText></Error>
  <Response>
    <PricedOffer>
      <OfferID>{OFFER_ID}</OfferID>
      <TotalPrice><TotalAmount CurCode="AUD">120.00</TotalAmount></TotalPrice>
      <OfferItem>
        <OfferItemID>{OFFER_ID}-oi-1</OfferItemID>
        <FareDetail><PaxRefID>ADT1</PaxRefID></FareDetail>
      </OfferItem>
    </PricedOffer>
  </Response>
</IATA_OfferPriceRS>
"""

PRICE_BUNDLE_REJECTION_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<IATA_OfferPriceRS xmlns="{MSG_NS}">
  <Error><Code>OF4053</Code><DescText>Error encountered selling SSRs for service bundle P200</DescText></Error>
</IATA_OfferPriceRS>
"""

PRICE_HARD_REJECTION_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<IATA_OfferPriceRS xmlns="{MSG_NS}">
  <Error><Code>OF2002</Code><DescText>Offer expired</DescText></Error>
</IATA_OfferPriceRS>
"""


SERVICE_LIST_OFFER_ID = f"id-v2-{RESPONSE_UUID}-sl"

SERVICE_LIST_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<IATA_ServiceListRS xmlns="{MSG_NS}">
  <Error><Code>OF4071</Code><DescText>Error encountered calling SSRs for service bundle M202</DescText></Error>
  <Response>
    <ALaCarteOffer>
      <OfferID Owner="JQ">{SERVICE_LIST_OFFER_ID}</OfferID>
      <OfferItem>
        <OfferItemID>sl-bag</OfferItemID>
        <Eligibility>
          <OfferFlightAssociations>
            <PaxSegmentReferences><PaxSegmentRefID>seg1</PaxSegmentRefID></PaxSegmentReferences>
          </OfferFlightAssociations>
          <PaxRefID>ADT1</PaxRefID>
          <PaxRefID>ADT2</PaxRefID>
        </Eligibility>
        <Service><ServiceDefinitionRefID>SD-BAG</ServiceDefinitionRefID></Service>
        <UnitPrice><TotalAmount CurCode="NZD">30.00</TotalAmount></UnitPrice>
      </OfferItem>
      <OfferItem>
        <OfferItemID>sl-plus</OfferItemID>
        <Eligibility>
          <OfferFlightAssociations>
            <PaxJourneyRef><PaxJourneyRefID>fl1</PaxJourneyRefID></PaxJourneyRef>
          </OfferFlightAssociations>
          <PaxRefID>ADT1</PaxRefID>
        </Eligibility>
        <Service><ServiceDefinitionRefID>SD-PLUS</ServiceDefinitionRefID></Service>
        <UnitPrice><TotalAmount CurCode="AUD">45.00</TotalAmount></UnitPrice>
      </OfferItem>
      <OfferItem>
        <OfferItemID>sl-plus</OfferItemID>
        <Eligibility>
          <OfferFlightAssociations>
            <PaxJourneyRef><PaxJourneyRefID>fl1</PaxJourneyRefID></PaxJourneyRef>
          </OfferFlightAssociations>
          <PaxRefID>ADT2</PaxRefID>
        </Eligibility>
        <Service><ServiceDefinitionRefID>SD-PLUS</ServiceDefinitionRefID></Service>
        <UnitPrice><TotalAmount CurCode="AUD">45.00</TotalAmount></UnitPrice>
      </OfferItem>
      <OfferItem>
        <OfferItemID>sl-legx</OfferItemID>
        <Eligibility>
          <OfferFlightAssociations>
            <PaxSegmentReferences><PaxSegmentRefID>Mkt-seg1</PaxSegmentRefID></PaxSegmentReferences>
          </OfferFlightAssociations>
          <PaxRefID>ADT1</PaxRefID>
          <PaxRefID>CHD1</PaxRefID>
        </Eligibility>
        <Service><ServiceDefinitionRefID>SD-LEGX</ServiceDefinitionRefID></Service>
        <UnitPrice><TotalAmount CurCode="AUD">0.00</TotalAmount></UnitPrice>
      </OfferItem>
      <OfferItem>
        <OfferItemID>sl-upfx</OfferItemID>
        <Eligibility>
          <OfferFlightAssociations>
            <PaxJourneyRef><PaxJourneyRefID>fl1</PaxJourneyRefID></PaxJourneyRef>
          </OfferFlightAssociations>
          <PaxRefID>ADT1</PaxRefID>
        </Eligibility>
        <Service><ServiceDefinitionRefID>SD-UPFX</ServiceDefinitionRefID></Service>
      </OfferItem>
      <OfferItem>
        <OfferItemID>sl-jlsf</OfferItemID>
        <Eligibility>
          <OfferFlightAssociations>
            <DatedOperatingLegRef><DatedOperatingLegRefID>leg1</DatedOperatingLegRefID></DatedOperatingLegRef>
          </OfferFlightAssociations>
          <PaxRefID>ADT1</PaxRefID>
        </Eligibility>
        <Service><ServiceDefinitionRefID>SD-JLSF</ServiceDefinitionRefID></Service>
      </OfferItem>
      <OfferItem>
        <OfferItemID>sl-unknown</OfferItemID>
        <Eligibility><PaxRefID>ADT1</PaxRefID></Eligibility>
        <Service><ServiceDefinitionRefID>SD-NOPE</ServiceDefinitionRefID></Service>
      </OfferItem>
    </ALaCarteOffer>
    <DataLists>
      <PaxJourneyList>
        <PaxJourney>
          <PaxJourneyID>fl1</PaxJourneyID>
          <PaxSegmentRefID>seg1</PaxSegmentRefID>
          <PaxSegmentRefID>seg2</PaxSegmentRefID>
        </PaxJourney>
      </PaxJourneyList>
      <ServiceDefinitionList>
        <ServiceDefinition>
          <ServiceDefinitionID>SD-BAG</ServiceDefinitionID>
          <Name>20kg checked bag</Name>
          <ServiceCode>BG20</ServiceCode>
          <RFIC>C</RFIC>
        </ServiceDefinition>
        <ServiceDefinition>
          <ServiceDefinitionID>SD-PLUS</ServiceDefinitionID>
          <Name>Plus</Name>
          <ServiceCode>P200</ServiceCode>
          <RFIC>G</RFIC>
          <RFISC>0L8</RFISC>
          <ServiceBundle><ServiceDefinitionRefID>SD-BAG</ServiceDefinitionRefID></ServiceBundle>
        </ServiceDefinition>
        <ServiceDefinition>
          <ServiceDefinitionID>SD-LEGX</ServiceDefinitionID>
          <Name>Extra legroom</Name>
          <ServiceCode>LEGX</ServiceCode>
          <RFIC>P</RFIC>
        </ServiceDefinition>
        <ServiceDefinition>
          <ServiceDefinitionID>SD-UPFX</ServiceDefinitionID>
          <Name>Upfront seat</Name>
          <ServiceCode>UPFX</ServiceCode>
          <RFIC>A</RFIC>
        </ServiceDefinition>
        <ServiceDefinition>
          <ServiceDefinitionID>SD-JLSF</ServiceDefinitionID>
          <Name>Seat fee</Name>
          <ServiceCode>JLSF</ServiceCode>
          <RFIC>P</RFIC>
        </ServiceDefinition>
      </ServiceDefinitionList>
    </DataLists>
  </Response>
</IATA_ServiceListRS>
"""

SERVICE_LIST_ERROR_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<IATA_ServiceListRS xmlns="{MSG_NS}">
  <Error><Code>OF2003</Code><DescText>No services available</DescText></Error>
</IATA_ServiceListRS>
"""


@pytest.fixture(autouse=True)
def clean_state():
    """Fresh configuration, container and counters for every test."""
    reset_config()
    reset_container()
    metrics.reset_counters()
    yield
    reset_config()
    reset_container()
    metrics.reset_counters()


@pytest.fixture
def document_parser():
    return LxmlDocumentParser()


@pytest.fixture
def shopping_reader(document_parser):
    return document_parser.parse(SHOPPING_XML)


@pytest.fixture
def seat_reader(document_parser):
    return document_parser.parse(SEAT_AVAILABILITY_XML)


@pytest.fixture
def service_list_reader(document_parser):
    return document_parser.parse(SERVICE_LIST_XML)
